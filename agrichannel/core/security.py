from datetime import datetime, timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Request
from jose import jwt
from passlib.context import CryptContext

from agrichannel.core.config import Settings


@lru_cache
def _password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(password: str, rounds: int = 10) -> str:
    return _password_context(rounds).hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return _password_context(10).verify(plain, hashed)


def create_access_token(account_id: int, settings: Settings) -> str:
    expire = datetime.utcnow() + timedelta(days=settings.access_token_expire_days)
    to_encode = {"sub": str(account_id), "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Settings) -> int:
    """Return the account id carried by ``token``; raises JWTError/ValueError."""
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    return int(payload["sub"])


def bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization")
    if not auth:
        return None
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()

