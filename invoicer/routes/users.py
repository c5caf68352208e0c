# INVOICER/backend/invoicer/routes/users.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from invoicer.auth import Principal, get_current_user, require_admin
from invoicer.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from invoicer.database import get_db
from invoicer.schemas import schemas
from invoicer.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"], responses=schemas.ERROR_RESPONSES)

# ---------- Compte courant ----------
@router.get("/profile", response_model=schemas.UserOut)
def get_profile(db: Session = Depends(get_db), current_user: Principal = Depends(get_current_user)):
    return UserService(db).get(current_user.id)

@router.put("/profile/password", response_model=schemas.MessageOut)
def change_password(
    body: schemas.PasswordChange,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    UserService(db).change_password(current_user.id, body.old_password, body.new_password)
    return {"message": "Mot de passe modifié avec succès"}

# ---------- Administration ----------
@router.get("", response_model=schemas.Page[schemas.UserOut])
def list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    return UserService(db).list(search=search, role=role, page=page, limit=limit)

@router.get("/{user_id}", response_model=schemas.UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    return UserService(db).get(user_id)

@router.post("", response_model=schemas.Envelope[schemas.UserOut], status_code=201)
def create_user(
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    created = UserService(db).create(user)
    return {"message": "Utilisateur créé avec succès", "data": created}

@router.put("/{user_id}", response_model=schemas.Envelope[schemas.UserOut])
def update_user(
    user_id: int,
    user: schemas.UserUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin)
):
    updated = UserService(db).update(user_id, user)
    return {"message": "Utilisateur mis à jour avec succès", "data": updated}

@router.delete("/{user_id}", response_model=schemas.MessageOut)
def delete_user(user_id: int, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    """Supprimer un utilisateur (jamais soi-même, jamais le dernier admin)"""
    UserService(db).delete(user_id, acting_user_id=admin.id)
    return {"message": "Utilisateur supprimé avec succès"}
