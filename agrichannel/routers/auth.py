from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from agrichannel.core.database import get_db
from agrichannel.schemas.account import AuthResponse, PasswordIn
from agrichannel.services.auth_service import AuthService

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=AuthResponse)
def register(
    payload: PasswordIn,
    request: Request,
    db: Session = Depends(get_db),
):
    result = AuthService(db, request.app.state.settings).register(payload.password)
    return AuthResponse(user_id=result.account_id, token=result.token)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: PasswordIn,
    request: Request,
    db: Session = Depends(get_db),
):
    result = AuthService(db, request.app.state.settings).login(payload.password)
    return AuthResponse(user_id=result.account_id, token=result.token)
