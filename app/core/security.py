from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
settings = get_settings()

ACCESS_TOKEN_TYPE = "access"


class InvalidToken(ValueError):
    pass


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # seeded or imported rows may carry a hash passlib cannot identify
        return False


def create_access_token(user_id: int, username: str, is_admin: bool) -> str:
    issued = datetime.now(timezone.utc)
    expires = issued + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    claims: Dict[str, Any] = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "username": username,
        "admin": is_admin,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id carried by a valid, unexpired access token."""
    try:
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise InvalidToken("Invalid or expired token") from exc

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidToken("Invalid token type")
    try:
        return int(claims.get("sub"))
    except (TypeError, ValueError) as exc:
        raise InvalidToken("Invalid token subject") from exc
