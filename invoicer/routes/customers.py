# INVOICER/backend/invoicer/routes/customers.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from invoicer.auth import Principal, get_current_user
from invoicer.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from invoicer.database import get_db
from invoicer.schemas import schemas
from invoicer.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"], responses=schemas.ERROR_RESPONSES)

@router.get("", response_model=schemas.Page[schemas.CustomerOut])
def list_customers(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Liste paginée des clients (recherche sur nom et email)"""
    return CustomerService(db).list(search=search, page=page, limit=limit)

@router.get("/{customer_id}", response_model=schemas.CustomerDetail)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Détail d'un client avec le résumé de ses factures"""
    return CustomerService(db).get(customer_id)

@router.post("", response_model=schemas.Envelope[schemas.CustomerOut], status_code=201)
def create_customer(
    customer: schemas.CustomerCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    created = CustomerService(db).create(customer)
    return {"message": "Client créé avec succès", "data": created}

@router.put("/{customer_id}", response_model=schemas.Envelope[schemas.CustomerOut])
def update_customer(
    customer_id: int,
    customer: schemas.CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = CustomerService(db).update(customer_id, customer)
    return {"message": "Client mis à jour avec succès", "data": updated}

@router.delete("/{customer_id}", response_model=schemas.MessageOut)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Supprimer un client (refusé s'il possède des factures)"""
    CustomerService(db).delete(customer_id)
    return {"message": "Client supprimé avec succès"}
