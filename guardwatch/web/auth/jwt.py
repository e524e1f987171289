"""Bearer token signing and verification for the CCTV API."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError

from ...config import config

# Claims every accepted token must carry
REQUIRED_CLAIMS = ("sub", "role", "exp")


@dataclass
class TokenData:
    """Identity carried by a bearer token; ``name`` is the acknowledging actor."""
    user_id: str
    role: str
    name: str
    exp: datetime

    @property
    def is_expired(self) -> bool:
        return datetime.utcnow() > self.exp


def create_access_token(
    user_id: str,
    role: str,
    name: str = "",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Sign a token for a guard, supervisor or service caller.

    User sessions are issued by the workforce app; this is for tests and for
    a RemoteRegistry pointed at another instance of this service.

    Args:
        user_id: Subject of the token
        role: admin, supervisor, guard, ...
        name: Display name, defaults to the user id when decoded
        expires_delta: Lifetime, JWT_EXPIRE_MINUTES when omitted
    """
    issued = datetime.utcnow()
    lifetime = expires_delta or timedelta(minutes=config.JWT_EXPIRE_MINUTES)
    claims = {
        "sub": user_id,
        "role": role,
        "name": name,
        "iat": issued,
        "exp": issued + lifetime,
    }
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[TokenData]:
    """Verify signature and claims; None for anything unusable."""
    try:
        claims = jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
        if any(not claims.get(key) for key in REQUIRED_CLAIMS):
            return None
        return TokenData(
            user_id=str(claims["sub"]),
            role=str(claims["role"]),
            name=claims.get("name") or str(claims["sub"]),
            exp=datetime.utcfromtimestamp(claims["exp"]),
        )
    except (JWTError, ValueError, TypeError):
        return None
