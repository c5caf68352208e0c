# INVOICER/backend/invoicer/routes/products.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from invoicer.auth import Principal, get_current_user
from invoicer.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from invoicer.database import get_db
from invoicer.schemas import schemas
from invoicer.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"], responses=schemas.ERROR_RESPONSES)

@router.get("", response_model=schemas.Page[schemas.ProductOut])
def list_products(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Liste paginée des produits (recherche sur nom et description)"""
    return ProductService(db).list(search=search, page=page, limit=limit)

@router.get("/{product_id}", response_model=schemas.ProductDetail)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Détail d'un produit et des factures où il apparaît"""
    return ProductService(db).get(product_id)

@router.post("", response_model=schemas.Envelope[schemas.ProductOut], status_code=201)
def create_product(
    product: schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    created = ProductService(db).create(product)
    return {"message": "Produit créé avec succès", "data": created}

@router.put("/{product_id}", response_model=schemas.Envelope[schemas.ProductOut])
def update_product(
    product_id: int,
    product: schemas.ProductUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = ProductService(db).update(product_id, product)
    return {"message": "Produit mis à jour avec succès", "data": updated}

@router.delete("/{product_id}", response_model=schemas.MessageOut)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    ProductService(db).delete(product_id)
    return {"message": "Produit supprimé avec succès"}
