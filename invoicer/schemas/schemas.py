# INVOICER/backend/invoicer/schemas/schemas.py

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer
from pydantic.alias_generators import to_camel
from typing import Optional, List, Literal, Generic, TypeVar
from datetime import datetime, date
from decimal import Decimal
from invoicer.constants import ROLE_ADMIN, ROLE_USER

T = TypeVar("T")

class CamelModel(BaseModel):
    """Base commune : noms camelCase sur le fil, snake_case en Python"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )

# ---------- ENVELOPPES ----------
class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int

class Page(CamelModel, Generic[T]):
    data: List[T]
    meta: PageMeta

class Envelope(CamelModel, Generic[T]):
    message: str
    data: Optional[T] = None

class MessageOut(CamelModel):
    message: str

class ErrorOut(CamelModel):
    message: str
    error: bool = True

# Réponses d'erreur documentées sur chaque routeur
ERROR_RESPONSES = {
    400: {"model": ErrorOut, "description": "Données invalides ou règle métier violée"},
    401: {"model": ErrorOut, "description": "Non authentifié"},
    403: {"model": ErrorOut, "description": "Accès réservé aux administrateurs"},
    404: {"model": ErrorOut, "description": "Ressource introuvable"},
}

# ---------- USER SCHEMAS ----------
class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)  # Limite bcrypt
    role: Literal[ROLE_ADMIN, ROLE_USER] = ROLE_USER

class UserUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[Literal[ROLE_ADMIN, ROLE_USER]] = None

class UserOut(CamelModel):
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PasswordChange(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)

# ---------- AUTH SCHEMAS ----------
class LoginRequest(CamelModel):
    username: str
    password: str

class LoginData(CamelModel):
    user: UserOut
    token: str

class SetupCheck(CamelModel):
    setup_required: bool

# ---------- CUSTOMER SCHEMAS ----------
class CustomerCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    address: str = Field(min_length=5)

class CustomerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = Field(None, min_length=5)

class CustomerOut(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class InvoiceSummary(CamelModel):
    id: int
    number: str
    issue_date: date
    due_date: date
    status: str
    total_amount: Decimal

    @field_serializer('total_amount')
    def serialize_money(self, value: Decimal) -> float:
        """Sérialise un montant en nombre JSON."""
        return float(value)

class CustomerDetail(CustomerOut):
    invoices: List[InvoiceSummary] = []

# ---------- PRODUCT SCHEMAS ----------
class ProductCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = None
    price: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    unit: str = Field(min_length=1, max_length=32)

class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    unit: Optional[str] = Field(None, min_length=1, max_length=32)

class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    unit: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer('price')
    def serialize_money(self, value: Decimal) -> float:
        return float(value)

class ProductDetail(ProductOut):
    invoices: List[InvoiceSummary] = []

# ---------- INVOICE SCHEMAS ----------
class InvoiceItemIn(CamelModel):
    product_id: int
    quantity: int = Field(gt=0)
    price: Decimal = Field(gt=0, max_digits=14, decimal_places=2)

class InvoiceCreate(CamelModel):
    # Les totaux ne sont jamais acceptés en entrée : ils sont recalculés
    customer_id: int
    issue_date: date
    due_date: date
    items: List[InvoiceItemIn] = Field(min_length=1)
    notes: Optional[str] = None

class InvoiceUpdate(CamelModel):
    customer_id: Optional[int] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    items: Optional[List[InvoiceItemIn]] = Field(None, min_length=1)
    notes: Optional[str] = None
    status: Optional[str] = None

class InvoiceStatusUpdate(CamelModel):
    status: str

class InvoiceItemOut(CamelModel):
    id: int
    product_id: int
    quantity: int
    price: Decimal
    total: Decimal
    product: Optional[ProductOut] = None

    @field_serializer('price', 'total')
    def serialize_money(self, value: Decimal) -> float:
        return float(value)

class InvoiceOut(CamelModel):
    id: int
    number: str
    customer_id: int
    issue_date: date
    due_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    customer: Optional[CustomerOut] = None
    items: List[InvoiceItemOut] = []

    @field_serializer('subtotal', 'tax_amount', 'total_amount')
    def serialize_money(self, value: Decimal) -> float:
        """Sérialise un montant en nombre JSON."""
        return float(value)

# ---------- BUSINESS PROFILE SCHEMAS ----------
class BankAccount(CamelModel):
    bank_name: str = Field(min_length=1)
    account_number: str = Field(min_length=1)
    account_name: str = Field(min_length=1)

class BusinessProfileCreate(CamelModel):
    business_name: str = Field(min_length=2, max_length=100)
    address: str = Field(min_length=5)
    phone: str = Field(min_length=1)
    email: EmailStr
    website: Optional[str] = None
    tax_id: Optional[str] = None
    logo_url: Optional[str] = None
    bank_accounts: List[BankAccount] = []

class BusinessProfileUpdate(CamelModel):
    business_name: Optional[str] = Field(None, min_length=2, max_length=100)
    address: Optional[str] = Field(None, min_length=5)
    phone: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None
    logo_url: Optional[str] = None
    bank_accounts: Optional[List[BankAccount]] = None

class LogoUpdate(CamelModel):
    logo_url: str = Field(min_length=1)

class BankAccountsUpdate(CamelModel):
    bank_accounts: List[BankAccount]

class BusinessProfileOut(CamelModel):
    id: int
    business_name: str
    address: str
    phone: str
    email: str
    website: Optional[str] = None
    tax_id: Optional[str] = None
    logo_url: Optional[str] = None
    bank_accounts: List[BankAccount] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
