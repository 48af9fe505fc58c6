"""
User Route Handlers
Registration and login
"""
import logging
from datetime import datetime, timezone

import bcrypt
from pymongo.errors import DuplicateKeyError, PyMongoError

from core.auth.jwt_handler import create_access_token
from core.auth.permissions import resolve_role
from core.errors import InvalidCredentialsError, StorageError, ValidationError
from database.mongo import users_collection
from models.user_model import LoginRequest, UserCreate

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 6
USERNAME_MAX_LENGTH = 15
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 20


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def validate_registration(user: UserCreate) -> None:
    if not user.username or not user.password:
        raise ValidationError("Username and password are required")
    if not USERNAME_MIN_LENGTH <= len(user.username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters."
        )
    if not PASSWORD_MIN_LENGTH <= len(user.password) <= PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters."
        )


async def register_user_handler(user: UserCreate) -> dict:
    validate_registration(user)

    try:
        if await users_collection.find_one({"username": user.username}, {"_id": 1}):
            raise ValidationError("Username already exists")

        await users_collection.insert_one({
            "username": user.username,
            "password_hash": hash_password(user.password),
            "role": "user",
            "created_at": datetime.now(timezone.utc),
        })
    except DuplicateKeyError:
        # Lost a race with a concurrent registration of the same name
        raise ValidationError("Username already exists")
    except PyMongoError as e:
        logger.error(f"Register error for {user.username}: {e}")
        raise StorageError("Server error during registration")

    logger.info(f"User registered: {user.username}")
    return {"message": "User registered successfully"}


async def login_handler(credentials: LoginRequest) -> dict:
    if not credentials.username or not credentials.password:
        raise InvalidCredentialsError("Invalid credentials")

    try:
        user = await users_collection.find_one({"username": credentials.username.strip()})
    except PyMongoError as e:
        logger.error(f"Login error for {credentials.username}: {e}")
        raise StorageError("Server error during login")

    if not user or not verify_password(credentials.password, user.get("password_hash", "")):
        raise InvalidCredentialsError("Invalid credentials")

    role = resolve_role(user)
    token = create_access_token(str(user["_id"]), user["username"], role)
    logger.info(f"User logged in: {user['username']} (role={role})")
    return {
        "message": "Login successful",
        "token": token,
        "username": user["username"],
        "role": role,
    }
