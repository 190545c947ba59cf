import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # A sqlite file in the working directory keeps the tool self-contained.
    # Any SQLAlchemy URL works here.
    DB_URL: str = os.getenv("DB_URL") or "sqlite:///./internet_outages.db"

    TARGET_IP: str = os.getenv("TARGET_IP") or "8.8.8.8"
    TARGET_PORT: int = int(os.getenv("TARGET_PORT") or 53)
    CHECK_INTERVAL: float = float(os.getenv("CHECK_INTERVAL") or 5)

    # Must stay below CHECK_INTERVAL so one hung connect never eats a tick.
    PROBE_TIMEOUT: float = float(os.getenv("PROBE_TIMEOUT") or 1)

    # Losing an outage-close event breaks the outage history, so transition
    # writes are retried before giving up.
    WRITE_RETRIES: int = int(os.getenv("WRITE_RETRIES") or 3)
    WRITE_RETRY_DELAY: float = float(os.getenv("WRITE_RETRY_DELAY") or 0.5)

    # How long sqlite waits on a lock held by another process (seconds)
    DB_BUSY_TIMEOUT: float = float(os.getenv("DB_BUSY_TIMEOUT") or 30)

    CURRENCY: str = os.getenv("CURRENCY") or "€"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL") or "INFO"


settings = Settings()
