import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    PROJECT_NAME: str = "SmartCharge"
    PROJECT_VERSION: str = "1.0.0"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./smartcharge.db")
    SQL_ECHO: bool = os.getenv("SQL_ECHO", "false").lower() == "true"
    LOG_FILE: str = os.getenv("LOG_FILE", "smartcharge.log")
    LOG_ROTATION: str = os.getenv("LOG_ROTATION", "500 MB")
    DEFAULT_SLOT_PRICE: float = float(os.getenv("DEFAULT_SLOT_PRICE", "5.0"))
    DEMO_USER_EMAIL: str = os.getenv("DEMO_USER_EMAIL", "driver@test.com")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

settings = Settings()
