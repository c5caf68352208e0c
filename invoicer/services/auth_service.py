# INVOICER/backend/invoicer/services/auth_service.py

import logging
from invoicer.auth import verify_password, create_access_token
from invoicer.models import models
from invoicer.schemas import schemas
from invoicer.services.base import BaseService
from invoicer.services.user_service import UserService
from invoicer.exceptions import AuthError

logger = logging.getLogger(__name__)

class AuthService(BaseService):
    """Inscription, connexion et détection de la première installation"""

    def register(self, data: schemas.UserCreate) -> models.User:
        return UserService(self.db).create(data)

    def login(self, username: str, password: str) -> tuple:
        """Retourne (utilisateur, jeton) ou lève AuthError"""
        user = self.db.query(models.User).filter(models.User.username == username).first()
        # Même message pour un utilisateur inconnu ou un mauvais mot de passe
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Échec de connexion pour '{username}'")
            raise AuthError("Nom d'utilisateur ou mot de passe incorrect")

        token = create_access_token(user)
        logger.info(f"Connexion réussie: {user.username}")
        return user, token

    def setup_required(self) -> bool:
        """Vrai tant qu'aucun administrateur n'existe"""
        return not UserService(self.db).has_admin()
