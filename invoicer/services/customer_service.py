# INVOICER/backend/invoicer/services/customer_service.py

import logging
from typing import Optional
from sqlalchemy import or_
from invoicer.models import models
from invoicer.schemas import schemas
from invoicer.services.base import BaseService
from invoicer.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Colonnes qui acceptent d'être remises à NULL par une mise à jour
NULLABLE_FIELDS = {"phone"}

class CustomerService(BaseService):
    """Gestion des clients"""

    def get(self, customer_id: int) -> models.Customer:
        customer = self.db.query(models.Customer).filter(models.Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError("Client introuvable")
        return customer

    def list(self, search: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
        query = self.db.query(models.Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                models.Customer.name.ilike(pattern),
                models.Customer.email.ilike(pattern)
            ))
        query = query.order_by(models.Customer.created_at.desc(), models.Customer.id.desc())
        return self._paginate(query, page, limit)

    def _ensure_email_free(self, email: str, exclude_id: Optional[int] = None):
        query = self.db.query(models.Customer).filter(models.Customer.email == email)
        if exclude_id is not None:
            query = query.filter(models.Customer.id != exclude_id)
        if query.first():
            raise ValidationError("Email client déjà enregistré")

    def create(self, data: schemas.CustomerCreate) -> models.Customer:
        self._ensure_email_free(data.email)

        customer = models.Customer(**data.model_dump())
        self.db.add(customer)
        self._commit("Email client déjà enregistré")
        self.db.refresh(customer)
        logger.info(f"Client créé: {customer.id} ({customer.email})")
        return customer

    def update(self, customer_id: int, data: schemas.CustomerUpdate) -> models.Customer:
        customer = self.get(customer_id)
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }

        if "email" in changes and changes["email"] != customer.email:
            self._ensure_email_free(changes["email"], exclude_id=customer.id)

        for field, value in changes.items():
            setattr(customer, field, value)
        self._commit("Email client déjà enregistré")
        self.db.refresh(customer)
        return customer

    def delete(self, customer_id: int):
        customer = self.get(customer_id)

        invoice_count = self.db.query(models.Invoice).filter(
            models.Invoice.customer_id == customer.id
        ).count()
        if invoice_count > 0:
            logger.warning(f"Suppression refusée: client {customer.id} a {invoice_count} facture(s)")
            raise ValidationError("Impossible de supprimer un client qui possède des factures")

        self.db.delete(customer)
        self._commit()
        logger.info(f"Client supprimé: {customer_id}")
