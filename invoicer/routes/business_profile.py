# INVOICER/backend/invoicer/routes/business_profile.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from invoicer.auth import Principal, get_current_user
from invoicer.database import get_db
from invoicer.schemas import schemas
from invoicer.services.business_profile_service import BusinessProfileService

router = APIRouter(prefix="/business-profile", tags=["business-profile"], responses=schemas.ERROR_RESPONSES)

@router.get("", response_model=schemas.BusinessProfileOut)
def get_business_profile(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Profil de l'entreprise (404 tant qu'il n'est pas créé)"""
    return BusinessProfileService(db).get_profile()

@router.post("", response_model=schemas.Envelope[schemas.BusinessProfileOut], status_code=201)
def create_business_profile(
    profile: schemas.BusinessProfileCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Créer le profil unique de l'entreprise"""
    created = BusinessProfileService(db).create(profile)
    return {"message": "Profil de l'entreprise créé avec succès", "data": created}

@router.put("/{profile_id}", response_model=schemas.Envelope[schemas.BusinessProfileOut])
def update_business_profile(
    profile_id: int,
    profile: schemas.BusinessProfileUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = BusinessProfileService(db).update(profile_id, profile)
    return {"message": "Profil de l'entreprise mis à jour", "data": updated}

@router.put("/{profile_id}/logo", response_model=schemas.Envelope[schemas.BusinessProfileOut])
def update_logo(
    profile_id: int,
    body: schemas.LogoUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = BusinessProfileService(db).update_logo(profile_id, body.logo_url)
    return {"message": "Logo mis à jour", "data": updated}

@router.put("/{profile_id}/bank-accounts", response_model=schemas.Envelope[schemas.BusinessProfileOut])
def update_bank_accounts(
    profile_id: int,
    body: schemas.BankAccountsUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = BusinessProfileService(db).update_bank_accounts(profile_id, body.bank_accounts)
    return {"message": "Comptes bancaires mis à jour", "data": updated}
