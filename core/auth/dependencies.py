"""
Bearer token authentication dependencies
Centralized auth logic for all routes
"""
import logging

from fastapi import Request

from core.auth.jwt_handler import decode_token
from core.errors import AuthError, AuthorizationError
from models.user_model import CurrentUser

logger = logging.getLogger(__name__)


def get_current_user(request: Request) -> CurrentUser:
    """
    Verify the bearer token and return the identity it carries
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthError("Access denied. No token provided.")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise AuthError("Access denied. No token provided.")

    decoded = decode_token(token)
    if not decoded or not decoded.get("sub") or not decoded.get("username"):
        logger.info("Rejected invalid or expired token")
        raise AuthError("Invalid token")

    user = CurrentUser(
        user_id=decoded["sub"],
        username=decoded["username"],
        role=decoded.get("role", "user"),
    )
    request.state.user = user
    return user


def require_admin(request: Request) -> CurrentUser:
    user = get_current_user(request)
    if not user.is_admin:
        raise AuthorizationError("Admin privileges required")
    return user
