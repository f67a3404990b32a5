from datetime import datetime

from smartcharge.models import Campaign


def campaign_body(operator, **overrides):
    body = {
        "title": "Night Bonus",
        "description": "Extra coins at night",
        "status": "ACTIVE",
        "discount": "%10",
        "endDate": "2099-01-01T00:00:00Z",
        "ownerId": operator.id,
        "coinReward": 25,
    }
    body.update(overrides)
    return body


def test_create_and_list_by_owner(client, operator, station):
    first = client.post("/campaigns", json=campaign_body(operator, title="First"))
    second = client.post("/campaigns", json=campaign_body(operator, title="Second", stationId=station.id))

    assert first.status_code == 200
    assert second.json()["stationName"] == station.name
    assert second.json()["endDate"] == "2099-01-01T00:00:00"

    listed = client.get("/campaigns", params={"ownerId": operator.id}).json()
    assert [c["title"] for c in listed] == ["Second", "First"]


def test_create_defaults(client, operator):
    data = client.post("/campaigns", json={"title": "Bare", "ownerId": operator.id}).json()
    assert data["status"] == "DRAFT"
    assert data["coinReward"] == 0
    assert data["endDate"] is None
    assert data["stationId"] is None


def test_create_validation(client, operator):
    assert client.post("/campaigns", json={"ownerId": operator.id}).status_code == 400
    assert client.post("/campaigns", json={"title": "Orphan"}).status_code == 400
    assert client.post("/campaigns", json=campaign_body(operator, status="LIVE")).status_code == 400
    assert client.post("/campaigns", json=campaign_body(operator, endDate="soon")).status_code == 400
    assert client.post("/campaigns", json=campaign_body(operator, coinReward=-5)).status_code == 400
    assert client.get("/campaigns").status_code == 400


def test_update_replaces_badges(client, operator, badges):
    campaign_id = client.post("/campaigns", json=campaign_body(operator, targetBadgeIds=[badges["night"].id])).json()["id"]

    response = client.put(f"/campaigns/{campaign_id}", json=campaign_body(
        operator, title="Renamed", coinReward=40, targetBadgeIds=[badges["eco"].id, badges["weekend"].id]))

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Renamed"
    assert data["coinReward"] == 40
    assert sorted(b["name"] for b in data["targetBadges"]) == ["Eco Champion", "Weekend Warrior"]


def test_update_and_delete_unknown(client, operator):
    assert client.put("/campaigns/9999", json=campaign_body(operator)).status_code == 404
    assert client.delete("/campaigns/9999").status_code == 404


def test_unknown_badge_is_rejected(client, operator):
    assert client.post("/campaigns", json=campaign_body(operator, targetBadgeIds=[4242])).status_code == 404


def test_delete(client, db, operator):
    campaign_id = client.post("/campaigns", json=campaign_body(operator)).json()["id"]
    assert client.delete(f"/campaigns/{campaign_id}").json() == {"success": True}
    assert db.get(Campaign, campaign_id) is None


def test_for_user_matches_badges(client, db, operator, driver, badges, make_campaign):
    big = make_campaign(title="Big", coin_reward=80, target_badges=[badges["eco"]])
    small = make_campaign(title="Small", coin_reward=10, target_badges=[badges["night"], badges["weekend"]])
    make_campaign(title="Not mine", coin_reward=99, target_badges=[badges["weekend"]])
    make_campaign(title="Draft", status="DRAFT", coin_reward=99, target_badges=[badges["eco"]])
    make_campaign(title="Untargeted", coin_reward=99)

    response = client.get("/campaigns/for-user", params={"userId": driver.id})

    assert response.status_code == 200
    data = response.json()
    assert [c["id"] for c in data["campaigns"]] == [big.id, small.id]
    assert [b["name"] for b in data["campaigns"][1]["matchedBadges"]] == ["Night Owl"]
    assert sorted(b["name"] for b in data["userBadges"]) == ["Eco Champion", "Night Owl"]


def test_for_user_errors(client):
    assert client.get("/campaigns/for-user").status_code == 400
    assert client.get("/campaigns/for-user", params={"userId": 9999}).status_code == 404


def test_created_campaign_feeds_bookings(client, operator, driver, station):
    client.post("/campaigns", json=campaign_body(operator, coinReward=30, stationId=station.id))

    response = client.post("/reservations", json={
        "userId": driver.id,
        "stationId": station.id,
        "date": datetime(2024, 5, 1, 2).isoformat(),
        "hour": "02:00 - 03:00",
        "isGreen": True,
    })

    assert response.json()["reservation"]["earnedCoins"] == 80
