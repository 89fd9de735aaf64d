import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

# All stay dates and "today" comparisons use this zone's calendar day
HOTEL_TIMEZONE = os.getenv("HOTEL_TIMEZONE", "America/Bogota")

CREDIT_VALIDITY_DAYS = int(os.getenv("CREDIT_VALIDITY_DAYS", "30"))

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS", "*")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",") if origin.strip()
]
