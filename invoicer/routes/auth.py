# INVOICER/backend/invoicer/routes/auth.py

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import Optional
from invoicer.auth import Principal, get_current_user, get_optional_user
from invoicer.config import ACCESS_TOKEN_EXPIRE_MINUTES, COOKIE_NAME, COOKIE_SECURE, COOKIE_SAMESITE
from invoicer.database import get_db
from invoicer.exceptions import AuthError, AuthorizationError
from invoicer.schemas import schemas
from invoicer.services.auth_service import AuthService
from invoicer.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"], responses=schemas.ERROR_RESPONSES)

@router.post("/register", response_model=schemas.Envelope[schemas.UserOut], status_code=201)
def register(
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    current_user: Optional[Principal] = Depends(get_optional_user)
):
    """
    Inscription.
    Libre tant qu'aucun administrateur n'existe (assistant d'installation),
    réservée aux administrateurs ensuite.
    """
    service = AuthService(db)
    if not service.setup_required():
        if current_user is None:
            raise AuthError("Non authentifié")
        if not current_user.is_admin:
            raise AuthorizationError("Accès réservé aux administrateurs")

    created = service.register(user)
    return {"message": "Inscription réussie", "data": created}

@router.post("/login", response_model=schemas.Envelope[schemas.LoginData])
def login(credentials: schemas.LoginRequest, response: Response, db: Session = Depends(get_db)):
    """Connexion : jeton dans la réponse et dans un cookie httpOnly"""
    user, token = AuthService(db).login(credentials.username, credentials.password)

    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite=COOKIE_SAMESITE,
    )
    return {"message": "Connexion réussie", "data": {"user": user, "token": token}}

@router.post("/logout", response_model=schemas.MessageOut)
def logout(response: Response):
    response.delete_cookie(key=COOKIE_NAME, httponly=True, secure=COOKIE_SECURE, samesite=COOKIE_SAMESITE)
    return {"message": "Déconnexion réussie"}

@router.get("/me", response_model=schemas.UserOut)
def me(db: Session = Depends(get_db), current_user: Principal = Depends(get_current_user)):
    return UserService(db).get(current_user.id)

@router.get("/setup-check", response_model=schemas.SetupCheck)
def setup_check(db: Session = Depends(get_db)):
    """Indique si l'installation initiale (premier admin) reste à faire"""
    return {"setup_required": AuthService(db).setup_required()}
