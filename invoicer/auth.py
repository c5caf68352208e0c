# INVOICER/backend/invoicer/auth.py
"""
Authentification : hachage des mots de passe, jetons JWT et dépendances
FastAPI qui résolvent le principal de la requête.

Le jeton est lu dans le header `Authorization: Bearer ...` (clients API)
puis, à défaut, dans le cookie de session (client web). Rien n'est gardé
en mémoire entre deux requêtes.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session

from invoicer.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, COOKIE_NAME
from invoicer.constants import ROLE_ADMIN
from invoicer.database import get_db
from invoicer.exceptions import AuthError, AuthorizationError
from invoicer.models import models

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class Principal(BaseModel):
    """Identité authentifiée attachée à une requête"""
    id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# ============================================
# MOTS DE PASSE
# ============================================
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash corrompu ou dans un autre format
        return False


# ============================================
# JETONS
# ============================================
def create_access_token(user: models.User, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    """Signe un JWT portant l'identité de l'utilisateur"""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

def decode_access_token(token: str) -> Optional[dict]:
    """Retourne les claims du jeton, ou None s'il est invalide ou expiré"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Jeton expiré")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Jeton invalide: {e}")
        return None


# ============================================
# DÉPENDANCES FASTAPI
# ============================================
def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    # Le header prime sur le cookie
    if credentials:
        return credentials.credentials
    return request.cookies.get(COOKIE_NAME)

def _resolve_principal(db: Session, token: str) -> Principal:
    claims = decode_access_token(token)
    if not claims:
        raise AuthError("Jeton invalide ou expiré")

    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        raise AuthError("Jeton invalide")

    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise AuthError("Utilisateur introuvable")

    # Le rôle vient de la base : une rétrogradation prend effet immédiatement
    return Principal(id=user.id, username=user.username, role=user.role)

def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Principal:
    """Principal de la requête, ou 401"""
    token = _extract_token(request, credentials)
    if not token:
        raise AuthError("Non authentifié")
    return _resolve_principal(db, token)

def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[Principal]:
    """Comme get_current_user, mais None quand aucun identifiant n'est fourni"""
    token = _extract_token(request, credentials)
    if not token:
        return None
    return _resolve_principal(db, token)

def require_admin(current_user: Principal = Depends(get_current_user)) -> Principal:
    """Réservé aux administrateurs, sinon 403"""
    if not current_user.is_admin:
        logger.warning(f"Accès admin refusé pour {current_user.username}")
        raise AuthorizationError("Accès réservé aux administrateurs")
    return current_user
