# INVOICER/backend/invoicer/services/business_profile_service.py

import logging
from typing import List, Optional
from invoicer.models import models
from invoicer.schemas import schemas
from invoicer.services.base import BaseService
from invoicer.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"website", "tax_id", "logo_url"}

def _dump_bank_accounts(accounts: List[schemas.BankAccount]) -> list:
    # Stockés tels qu'ils circulent sur le fil : {bankName, accountNumber, accountName}
    return [account.model_dump(by_alias=True) for account in accounts]

class BusinessProfileService(BaseService):
    """Profil unique de l'entreprise (en-tête des factures)"""

    def get_profile(self) -> models.BusinessProfile:
        profile = self.find_profile()
        if not profile:
            raise NotFoundError("Profil de l'entreprise pas encore créé")
        return profile

    def find_profile(self) -> Optional[models.BusinessProfile]:
        return self.db.query(models.BusinessProfile).order_by(models.BusinessProfile.id).first()

    def _get(self, profile_id: int) -> models.BusinessProfile:
        profile = self.db.query(models.BusinessProfile).filter(
            models.BusinessProfile.id == profile_id
        ).first()
        if not profile:
            raise NotFoundError("Profil de l'entreprise introuvable")
        return profile

    def create(self, data: schemas.BusinessProfileCreate) -> models.BusinessProfile:
        if self.find_profile():
            logger.warning("Tentative de création d'un second profil d'entreprise")
            raise ValidationError("Le profil de l'entreprise existe déjà, utilisez la mise à jour")

        values = data.model_dump(exclude={"bank_accounts"})
        profile = models.BusinessProfile(
            **values,
            bank_accounts=_dump_bank_accounts(data.bank_accounts)
        )
        self.db.add(profile)
        self._commit()
        self.db.refresh(profile)
        logger.info(f"Profil d'entreprise créé: {profile.business_name}")
        return profile

    def update(self, profile_id: int, data: schemas.BusinessProfileUpdate) -> models.BusinessProfile:
        profile = self._get(profile_id)
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True, exclude={"bank_accounts"}).items()
            if v is not None or k in NULLABLE_FIELDS
        }

        for field, value in changes.items():
            setattr(profile, field, value)
        if data.bank_accounts is not None:
            profile.bank_accounts = _dump_bank_accounts(data.bank_accounts)

        self._commit()
        self.db.refresh(profile)
        return profile

    def update_logo(self, profile_id: int, logo_url: str) -> models.BusinessProfile:
        profile = self._get(profile_id)
        profile.logo_url = logo_url
        self._commit()
        self.db.refresh(profile)
        return profile

    def update_bank_accounts(self, profile_id: int, accounts: List[schemas.BankAccount]) -> models.BusinessProfile:
        profile = self._get(profile_id)
        # Nouvelle liste : SQLAlchemy ne suit pas les mutations internes d'un JSON
        profile.bank_accounts = _dump_bank_accounts(accounts)
        self._commit()
        self.db.refresh(profile)
        return profile
