# zenwhisper/core/config.py
import os
from dotenv import load_dotenv


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Setup environment variables.
        - CORS_ORIGINS comma-separated list of allowed frontend origins
        - SECRET_KEY / JWT_ALGORITHM / ACCESS_TOKEN_EXPIRE_MINUTES token signing
        - PRESENCE_TIMEZONE zone used for join/leave notification timestamps
        - NOTIFY_ON_LEAVE whether "has left the room." notifications are sent
        - ANONYMOUS_NAME display name used when join_room carries no username
        - SEND_TIMEOUT_SECONDS upper bound for a single websocket delivery
    """

    # Load environment variables from the .env file
    load_dotenv()

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))

    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    PRESENCE_TIMEZONE: str = os.getenv("PRESENCE_TIMEZONE", "Asia/Dhaka")
    NOTIFY_ON_LEAVE: bool = _env_bool("NOTIFY_ON_LEAVE", "true")
    ANONYMOUS_NAME: str = os.getenv("ANONYMOUS_NAME", "Anonymous")

    SEND_TIMEOUT_SECONDS: float = float(os.getenv("SEND_TIMEOUT_SECONDS", "5"))

settings = Settings()
