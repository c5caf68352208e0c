# INVOICER/backend/invoicer/services/user_service.py

import logging
from typing import Optional
from sqlalchemy import or_
from invoicer.auth import hash_password, verify_password
from invoicer.constants import ROLE_ADMIN, USER_ROLES
from invoicer.models import models
from invoicer.schemas import schemas
from invoicer.services.base import BaseService
from invoicer.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

class UserService(BaseService):
    """Comptes utilisateurs. Au moins un administrateur doit toujours exister."""

    def get(self, user_id: int) -> models.User:
        user = self.db.query(models.User).filter(models.User.id == user_id).first()
        if not user:
            raise NotFoundError("Utilisateur introuvable")
        return user

    def list(self, search: Optional[str] = None, role: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
        query = self.db.query(models.User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                models.User.username.ilike(pattern),
                models.User.email.ilike(pattern)
            ))
        if role:
            if role not in USER_ROLES:
                raise ValidationError("Rôle invalide")
            query = query.filter(models.User.role == role)
        query = query.order_by(models.User.created_at.desc(), models.User.id.desc())
        return self._paginate(query, page, limit)

    def count_admins(self) -> int:
        return self.db.query(models.User).filter(models.User.role == ROLE_ADMIN).count()

    def has_admin(self) -> bool:
        return self.count_admins() > 0

    def _ensure_unique(self, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
        conditions = []
        if username:
            conditions.append(models.User.username == username)
        if email:
            conditions.append(models.User.email == email)
        if not conditions:
            return
        query = self.db.query(models.User).filter(or_(*conditions))
        if exclude_id is not None:
            query = query.filter(models.User.id != exclude_id)
        if query.first():
            raise ValidationError("Nom d'utilisateur ou email déjà utilisé")

    def create(self, data: schemas.UserCreate) -> models.User:
        self._ensure_unique(data.username, data.email)

        user = models.User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            role=data.role
        )
        self.db.add(user)
        self._commit("Nom d'utilisateur ou email déjà utilisé")
        self.db.refresh(user)
        logger.info(f"Utilisateur créé: {user.username} ({user.role})")
        return user

    def update(self, user_id: int, data: schemas.UserUpdate) -> models.User:
        user = self.get(user_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        self._ensure_unique(changes.get("username"), changes.get("email"), exclude_id=user.id)

        if user.role == ROLE_ADMIN and changes.get("role", ROLE_ADMIN) != ROLE_ADMIN:
            if self.count_admins() <= 1:
                raise ValidationError("Impossible de rétrograder le dernier administrateur")

        if "password" in changes:
            user.password_hash = hash_password(changes.pop("password"))
        for field, value in changes.items():
            setattr(user, field, value)

        self._commit("Nom d'utilisateur ou email déjà utilisé")
        self.db.refresh(user)
        return user

    def delete(self, user_id: int, acting_user_id: Optional[int] = None):
        if acting_user_id is not None and user_id == acting_user_id:
            raise ValidationError("Impossible de supprimer votre propre compte")

        user = self.get(user_id)
        if user.role == ROLE_ADMIN and self.count_admins() <= 1:
            logger.warning(f"Suppression refusée: {user.username} est le dernier administrateur")
            raise ValidationError("Impossible de supprimer le dernier administrateur")

        self.db.delete(user)
        self._commit()
        logger.info(f"Utilisateur supprimé: {user_id}")

    def change_password(self, user_id: int, old_password: str, new_password: str) -> models.User:
        user = self.get(user_id)
        if not verify_password(old_password, user.password_hash):
            raise ValidationError("Ancien mot de passe incorrect")

        user.password_hash = hash_password(new_password)
        self._commit()
        self.db.refresh(user)
        logger.info(f"Mot de passe modifié pour {user.username}")
        return user
