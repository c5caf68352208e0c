# INVOICER/backend/invoicer/services/invoice_service.py : cycle de vie des factures
"""
Service des factures : numérotation mensuelle, calcul des totaux et
garde-fous du cycle de vie.

Numérotation
    INV/{YYYY}{MM}/{seq:04d}, où l'année et le mois sont ceux de l'horloge
    au moment de la création (pas la date d'émission). La séquence repart
    du plus grand numéro existant pour ce préfixe, jamais d'un comptage,
    donc les trous laissés par des suppressions ne sont pas réutilisés.

    Deux créations simultanées peuvent lire la même « dernière séquence ».
    La colonne `number` est UNIQUE en base : le second commit échoue, la
    transaction est annulée puis rejouée avec une séquence recalculée.

Totaux
    total ligne = quantité x prix saisi (prix figé), sous-total = somme des
    lignes, TVA = sous-total x 11 %, total = sous-total + TVA. Recalculés à
    chaque création et à chaque remplacement des lignes.

Statuts
    draft, sent, paid, cancelled. Seul « paid » verrouille la facture.
"""
import logging
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicer.config import INVOICE_NUMBER_MAX_RETRIES
from invoicer.constants import (
    TAX_RATE, MONEY_QUANTUM, INVOICE_STATUSES, STATUS_DRAFT, STATUS_PAID,
    INVOICE_NUMBER_PREFIX, INVOICE_SEQUENCE_WIDTH
)
from invoicer.exceptions import ConflictError, NotFoundError, ValidationError
from invoicer.models import models
from invoicer.schemas import schemas
from invoicer.services.base import BaseService

logger = logging.getLogger(__name__)


# ============================================
# NUMÉROTATION
# ============================================
def month_prefix(moment: datetime) -> str:
    """Préfixe mensuel, ex: 'INV/202505/'"""
    return f"{INVOICE_NUMBER_PREFIX}/{moment.year:04d}{moment.month:02d}/"

def format_invoice_number(moment: datetime, sequence: int) -> str:
    return f"{month_prefix(moment)}{sequence:0{INVOICE_SEQUENCE_WIDTH}d}"

def parse_sequence(number: str) -> int:
    """Extrait la séquence d'un numéro ('INV/202505/0007' -> 7)"""
    try:
        return int(number.rsplit("/", 1)[-1])
    except (ValueError, AttributeError):
        return 0

def next_invoice_number(db: Session, moment: Optional[datetime] = None) -> str:
    """Calcule le prochain numéro pour le mois de `moment` (maintenant par défaut)"""
    moment = moment or datetime.now()
    prefix = month_prefix(moment)

    # Les numéros les plus longs d'abord : '10000' doit passer devant '9999'
    last = db.query(models.Invoice.number).filter(
        models.Invoice.number.like(f"{prefix}%")
    ).order_by(
        func.length(models.Invoice.number).desc(),
        models.Invoice.number.desc()
    ).first()

    sequence = parse_sequence(last[0]) + 1 if last else 1
    return format_invoice_number(moment, sequence)


# ============================================
# TOTAUX
# ============================================
def _money(value) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)

def compute_totals(items: Iterable[schemas.InvoiceItemIn]) -> dict:
    """
    Calcule les lignes et les totaux à partir des prix fournis par l'appelant.

    Returns:
        dict avec `lines` (kwargs pour InvoiceItem), `subtotal`,
        `tax_amount` et `total_amount`
    """
    lines = []
    for position, item in enumerate(items):
        price = _money(item.price)
        lines.append({
            "product_id": item.product_id,
            "position": position,
            "quantity": item.quantity,
            "price": price,
            "total": _money(price * item.quantity)
        })

    subtotal = _money(sum((line["total"] for line in lines), Decimal("0")))
    tax_amount = _money(subtotal * TAX_RATE)
    return {
        "lines": lines,
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "total_amount": subtotal + tax_amount
    }


# ============================================
# SERVICE
# ============================================
class InvoiceService(BaseService):
    """Création, mise à jour et suppression des factures"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now):
        super().__init__(db)
        self.clock = clock

    # ---------- Lecture ----------
    def get(self, invoice_id: int) -> models.Invoice:
        invoice = self.db.query(models.Invoice).filter(models.Invoice.id == invoice_id).first()
        if not invoice:
            raise NotFoundError("Facture introuvable")
        return invoice

    def list(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10
    ) -> dict:
        query = self.db.query(models.Invoice).join(models.Invoice.customer)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                models.Invoice.number.ilike(pattern),
                models.Customer.name.ilike(pattern)
            ))
        if status:
            query = query.filter(models.Invoice.status == status)
        if customer_id:
            query = query.filter(models.Invoice.customer_id == customer_id)
        if start_date:
            query = query.filter(models.Invoice.issue_date >= start_date)
        if end_date:
            query = query.filter(models.Invoice.issue_date <= end_date)

        query = query.order_by(models.Invoice.created_at.desc(), models.Invoice.id.desc())
        return self._paginate(query, page, limit)

    # ---------- Garde-fous ----------
    def _ensure_customer(self, customer_id: int):
        exists = self.db.query(models.Customer.id).filter(models.Customer.id == customer_id).first()
        if not exists:
            raise NotFoundError("Client introuvable")

    def _ensure_products(self, items: List[schemas.InvoiceItemIn]):
        requested = {item.product_id for item in items}
        found = self.db.query(models.Product.id).filter(models.Product.id.in_(requested)).count()
        if found != len(requested):
            raise NotFoundError("Certains produits sont introuvables")

    @staticmethod
    def _ensure_status(status: str):
        if status not in INVOICE_STATUSES:
            raise ValidationError("Statut de facture invalide")

    @staticmethod
    def _ensure_not_paid(invoice: models.Invoice, message: str):
        if invoice.status == STATUS_PAID:
            logger.warning(f"Opération refusée sur la facture payée {invoice.number}")
            raise ValidationError(message)

    def _number_taken(self, number: str) -> bool:
        return self.db.query(models.Invoice.id).filter(models.Invoice.number == number).first() is not None

    # ---------- Écriture ----------
    def create(self, data: schemas.InvoiceCreate) -> models.Invoice:
        self._ensure_customer(data.customer_id)
        self._ensure_products(data.items)
        totals = compute_totals(data.items)

        for attempt in range(1, INVOICE_NUMBER_MAX_RETRIES + 1):
            number = next_invoice_number(self.db, self.clock())
            invoice = models.Invoice(
                number=number,
                customer_id=data.customer_id,
                issue_date=data.issue_date,
                due_date=data.due_date,
                subtotal=totals["subtotal"],
                tax_amount=totals["tax_amount"],
                total_amount=totals["total_amount"],
                status=STATUS_DRAFT,
                notes=data.notes,
                items=[models.InvoiceItem(**line) for line in totals["lines"]]
            )
            self.db.add(invoice)

            # Facture et lignes partent dans le même commit
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                if self._number_taken(number):
                    logger.warning(f"Numéro {number} déjà attribué, nouvelle tentative ({attempt}/{INVOICE_NUMBER_MAX_RETRIES})")
                    continue
                logger.warning(f"Création de facture rejetée par la base: {e.orig}")
                raise ConflictError("Conflit lors de la création de la facture")

            self.db.refresh(invoice)
            logger.info(f"Facture créée: {invoice.number} (total {invoice.total_amount})")
            return invoice

        logger.error(f"Échec d'attribution d'un numéro après {INVOICE_NUMBER_MAX_RETRIES} tentatives")
        raise ConflictError("Impossible d'attribuer un numéro de facture, veuillez réessayer")

    def update(self, invoice_id: int, data: schemas.InvoiceUpdate) -> models.Invoice:
        invoice = self.get(invoice_id)
        self._ensure_not_paid(invoice, "Une facture payée ne peut plus être modifiée")

        changes = data.model_dump(exclude_unset=True)

        if changes.get("status") is not None:
            self._ensure_status(changes["status"])
        if changes.get("customer_id") is not None:
            self._ensure_customer(changes["customer_id"])

        if data.items is not None:
            self._ensure_products(data.items)
            totals = compute_totals(data.items)

            # Remplacement complet : suppression puis insertion, dans la même transaction
            invoice.items.clear()
            self.db.flush()
            invoice.items.extend(models.InvoiceItem(**line) for line in totals["lines"])
            invoice.subtotal = totals["subtotal"]
            invoice.tax_amount = totals["tax_amount"]
            invoice.total_amount = totals["total_amount"]

        for field in ("customer_id", "issue_date", "due_date", "status"):
            if changes.get(field) is not None:
                setattr(invoice, field, changes[field])
        if "notes" in changes:
            invoice.notes = changes["notes"]

        self._commit("Conflit lors de la mise à jour de la facture")
        self.db.refresh(invoice)
        logger.info(f"Facture mise à jour: {invoice.number}")
        return invoice

    def update_status(self, invoice_id: int, status: str) -> models.Invoice:
        self._ensure_status(status)
        invoice = self.get(invoice_id)
        self._ensure_not_paid(invoice, "Le statut d'une facture payée ne peut plus changer")

        previous = invoice.status
        invoice.status = status
        self._commit()
        self.db.refresh(invoice)
        logger.info(f"Facture {invoice.number}: {previous} -> {status}")
        return invoice

    def delete(self, invoice_id: int):
        invoice = self.get(invoice_id)
        self._ensure_not_paid(invoice, "Une facture payée ne peut pas être supprimée")

        number = invoice.number
        # Les lignes suivent la facture (cascade delete-orphan)
        self.db.delete(invoice)
        self._commit()
        logger.info(f"Facture supprimée: {number}")
