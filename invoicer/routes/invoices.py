# INVOICER/backend/invoicer/routes/invoices.py

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from invoicer.auth import Principal, get_current_user
from invoicer.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from invoicer.database import get_db
from invoicer.schemas import schemas
from invoicer.services.invoice_service import InvoiceService
from invoicer.services.business_profile_service import BusinessProfileService
from invoicer.services.pdf_service import generate_invoice_pdf

router = APIRouter(prefix="/invoices", tags=["invoices"], responses=schemas.ERROR_RESPONSES)

@router.get("", response_model=schemas.Page[schemas.InvoiceOut])
def list_invoices(
    search: Optional[str] = None,
    status: Optional[str] = None,
    customer_id: Optional[int] = Query(None, alias="customerId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Liste des factures, les plus récentes d'abord"""
    return InvoiceService(db).list(
        search=search,
        status=status,
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit
    )

@router.get("/{invoice_id}", response_model=schemas.InvoiceOut)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    return InvoiceService(db).get(invoice_id)

@router.get("/{invoice_id}/pdf")
def download_invoice_pdf(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Facture imprimable au format PDF"""
    invoice = InvoiceService(db).get(invoice_id)
    profile = BusinessProfileService(db).find_profile()
    content = generate_invoice_pdf(invoice, profile)
    filename = invoice.number.replace("/", "-") + ".pdf"
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'}
    )

@router.post("", response_model=schemas.Envelope[schemas.InvoiceOut], status_code=201)
def create_invoice(
    invoice: schemas.InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    """Créer une facture (statut brouillon, numéro et totaux calculés)"""
    created = InvoiceService(db).create(invoice)
    return {"message": "Facture créée avec succès", "data": created}

@router.put("/{invoice_id}", response_model=schemas.Envelope[schemas.InvoiceOut])
def update_invoice(
    invoice_id: int,
    invoice: schemas.InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = InvoiceService(db).update(invoice_id, invoice)
    return {"message": "Facture mise à jour avec succès", "data": updated}

@router.put("/{invoice_id}/status", response_model=schemas.Envelope[schemas.InvoiceOut])
def update_invoice_status(
    invoice_id: int,
    body: schemas.InvoiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    updated = InvoiceService(db).update_status(invoice_id, body.status)
    return {"message": "Statut de la facture mis à jour", "data": updated}

@router.delete("/{invoice_id}", response_model=schemas.MessageOut)
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user)
):
    InvoiceService(db).delete(invoice_id)
    return {"message": "Facture supprimée avec succès"}
