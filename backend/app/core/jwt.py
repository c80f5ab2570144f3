from datetime import timedelta

from app.core.security import create_access_token
from app.core.config import settings


def create_backend_jwt(user_id: int, username: str) -> str:
    """
    Create backend JWT token for a registered user.
    Uses existing create_access_token from security module.

    Args:
        user_id: Primary key of the user (stored as the "sub" claim)
        username: Display name, carried for clients that decode the token

    Returns:
        Encoded JWT token string
    """
    return create_access_token(
        data={"sub": str(user_id), "username": username},
        expires_delta=timedelta(minutes=settings.JWT_EXPIRE_MIN)
    )
