# INVOICER/backend/invoicer/services/product_service.py

import logging
from typing import Optional
from sqlalchemy import or_
from invoicer.models import models
from invoicer.schemas import schemas
from invoicer.services.base import BaseService
from invoicer.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"description"}

class ProductService(BaseService):
    """Catalogue de produits"""

    def get(self, product_id: int) -> models.Product:
        product = self.db.query(models.Product).filter(models.Product.id == product_id).first()
        if not product:
            raise NotFoundError("Produit introuvable")
        return product

    def list(self, search: Optional[str] = None, page: int = 1, limit: int = 10) -> dict:
        query = self.db.query(models.Product)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                models.Product.name.ilike(pattern),
                models.Product.description.ilike(pattern)
            ))
        query = query.order_by(models.Product.created_at.desc(), models.Product.id.desc())
        return self._paginate(query, page, limit)

    def _ensure_name_free(self, name: str, exclude_id: Optional[int] = None):
        query = self.db.query(models.Product).filter(models.Product.name == name)
        if exclude_id is not None:
            query = query.filter(models.Product.id != exclude_id)
        if query.first():
            raise ValidationError("Nom de produit déjà utilisé")

    def create(self, data: schemas.ProductCreate) -> models.Product:
        self._ensure_name_free(data.name)

        product = models.Product(**data.model_dump())
        self.db.add(product)
        self._commit("Nom de produit déjà utilisé")
        self.db.refresh(product)
        logger.info(f"Produit créé: {product.id} ({product.name})")
        return product

    def update(self, product_id: int, data: schemas.ProductUpdate) -> models.Product:
        product = self.get(product_id)
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k in NULLABLE_FIELDS
        }

        if "name" in changes and changes["name"] != product.name:
            self._ensure_name_free(changes["name"], exclude_id=product.id)

        # Le prix des lignes déjà facturées reste figé : seul le catalogue change
        for field, value in changes.items():
            setattr(product, field, value)
        self._commit("Nom de produit déjà utilisé")
        self.db.refresh(product)
        return product

    def delete(self, product_id: int):
        product = self.get(product_id)

        usage = self.db.query(models.InvoiceItem).filter(
            models.InvoiceItem.product_id == product.id
        ).count()
        if usage > 0:
            logger.warning(f"Suppression refusée: produit {product.id} utilisé dans {usage} ligne(s)")
            raise ValidationError("Impossible de supprimer un produit utilisé dans une facture")

        self.db.delete(product)
        self._commit()
        logger.info(f"Produit supprimé: {product_id}")
