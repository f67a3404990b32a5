from smartcharge.models.badge import Badge, user_badges, campaign_badges
from smartcharge.models.user import User
from smartcharge.models.station import Station, StationDensityForecast
from smartcharge.models.reservation import Reservation
from smartcharge.models.campaign import Campaign
