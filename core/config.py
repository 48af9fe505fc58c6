"""
Environment configuration
Loads .env once and exposes a validated Settings object
"""
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

REQUIRED_ENV_VARS = (
    "MONGODB_URI",
    "JWT_SECRET_KEY",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
)


class ConfigError(RuntimeError):
    """Raised at boot when required environment variables are missing"""


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    mongodb_uri: str
    database_name: str = "recipehub"
    mongodb_tls: bool = False

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    cloudinary_folder: str = "recipehub/recipes"

    admin_usernames: List[str] = []
    frontend_url: Optional[str] = None
    debug: bool = False
    enable_scheduler: bool = True
    image_cleanup_grace_hours: int = 24


def load_settings() -> Settings:
    """
    Build Settings from the process environment.
    Raises ConfigError naming every missing required variable.
    """
    missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    admins = [u.strip() for u in os.getenv("ADMIN_USERNAMES", "").split(",") if u.strip()]

    return Settings(
        mongodb_uri=os.environ["MONGODB_URI"],
        database_name=os.getenv("DATABASE_NAME", "recipehub"),
        mongodb_tls=_env_flag("MONGODB_TLS"),
        jwt_secret_key=os.environ["JWT_SECRET_KEY"],
        jwt_expire_minutes=int(os.getenv("JWT_EXPIRE_MINUTES", "60")),
        cloudinary_cloud_name=os.environ["CLOUDINARY_CLOUD_NAME"],
        cloudinary_api_key=os.environ["CLOUDINARY_API_KEY"],
        cloudinary_api_secret=os.environ["CLOUDINARY_API_SECRET"],
        cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", "recipehub/recipes"),
        admin_usernames=admins,
        frontend_url=os.getenv("FRONTEND_URL"),
        debug=_env_flag("DEBUG"),
        enable_scheduler=_env_flag("ENABLE_SCHEDULER", "true"),
        image_cleanup_grace_hours=int(os.getenv("IMAGE_CLEANUP_GRACE_HOURS", "24")),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
