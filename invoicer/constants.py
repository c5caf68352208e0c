# INVOICER/backend/invoicer/constants.py

from decimal import Decimal

# Taux de TVA (PPN) fixe appliqué à toutes les factures
TAX_RATE = Decimal("0.11")

# Précision monétaire des montants stockés
MONEY_QUANTUM = Decimal("0.01")

# Statuts de facture
STATUS_DRAFT = "draft"
STATUS_SENT = "sent"
STATUS_PAID = "paid"
STATUS_CANCELLED = "cancelled"

INVOICE_STATUSES = [STATUS_DRAFT, STATUS_SENT, STATUS_PAID, STATUS_CANCELLED]

STATUS_LABELS = {
    STATUS_DRAFT: "Brouillon",
    STATUS_SENT: "Envoyée",
    STATUS_PAID: "Payée",
    STATUS_CANCELLED: "Annulée"
}

# Rôles utilisateur
ROLE_ADMIN = "admin"
ROLE_USER = "user"

USER_ROLES = (ROLE_ADMIN, ROLE_USER)

# Numérotation : INV/{YYYY}{MM}/{seq:04d}
INVOICE_NUMBER_PREFIX = "INV"
INVOICE_SEQUENCE_WIDTH = 4
