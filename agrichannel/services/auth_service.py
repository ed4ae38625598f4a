import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Optional

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agrichannel.core.config import Settings
from agrichannel.core.database import commit
from agrichannel.core.errors import AuthError, ConflictError, ValidationError
from agrichannel.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from agrichannel.models.account import Account

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4


def password_signature(password: str) -> str:
    """Fast deterministic fingerprint used only as a uniqueness/lookup key."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


@dataclass
class AuthResult:
    account_id: int
    token: str


class AuthService:
    """
    Registers and authenticates password-only accounts.

    The password fingerprint stands in for a username: registering a password
    that is already in use is a conflict, and login finds the account by the
    fingerprint before checking the salted hash.
    """

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def _find_by_signature(self, signature: str) -> Optional[Account]:
        return self.db.query(Account).filter(Account.password_sig == signature).first()

    def register(self, password: Any) -> AuthResult:
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 4 characters.")

        signature = password_signature(password)
        if self._find_by_signature(signature) is not None:
            raise ConflictError("An account with that password already exists.")

        account = Account(
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            password_sig=signature,
        )
        self.db.add(account)
        try:
            commit(self.db)
        except IntegrityError as exc:
            # lost a race with a concurrent registration of the same password
            raise ConflictError("An account with that password already exists.") from exc
        self.db.refresh(account)

        logger.info("Registered account %d", account.id)
        return AuthResult(account.id, create_access_token(account.id, self.settings))

    def login(self, password: Any) -> AuthResult:
        if not password or not isinstance(password, str):
            raise ValidationError("Password required.")

        account = self._find_by_signature(password_signature(password))
        if account is None:
            raise AuthError("Invalid password.")
        if not verify_password(password, account.password_hash):
            raise AuthError("Invalid password.")

        return AuthResult(account.id, create_access_token(account.id, self.settings))

    def authenticate(self, token: Optional[str]) -> Optional[Account]:
        """Resolve a bearer token to its account, or None if it is unusable."""
        if not token:
            return None
        try:
            account_id = decode_access_token(token, self.settings)
        except (JWTError, KeyError, TypeError, ValueError):
            return None
        return self.db.get(Account, account_id)
