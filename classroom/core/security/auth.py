from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from classroom.core.config.settings import get_settings
from classroom.core.errors import AuthenticationError

settings = get_settings()

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Claims every session token must carry
TOKEN_CLAIMS = ("id", "email", "role", "name")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def generate_token(data: dict, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed session token for a user row"""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    return generate_token(
        {
            "sub": user.id,
            "id": user.id,
            "email": user.email,
            "role": user.role.value,
            "name": user.name,
        },
        expires_delta,
    )

def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode a session token

    Returns:
        The token claims
    Raises:
        AuthenticationError if the token is expired, malformed or missing claims
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    if any(not payload.get(claim) for claim in TOKEN_CLAIMS):
        raise AuthenticationError("Invalid token payload")
    return payload
