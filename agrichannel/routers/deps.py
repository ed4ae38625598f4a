from fastapi import Depends, Request
from sqlalchemy.orm import Session

from agrichannel.core.config import Settings
from agrichannel.core.database import get_db
from agrichannel.core.errors import UnauthenticatedError
from agrichannel.core.security import bearer_token
from agrichannel.models.account import Account
from agrichannel.services.auth_service import AuthService


def get_current_account(request: Request, db: Session = Depends(get_db)) -> Account:
    settings: Settings = request.app.state.settings
    account = AuthService(db, settings).authenticate(bearer_token(request))
    if account is None:
        raise UnauthenticatedError()
    return account
