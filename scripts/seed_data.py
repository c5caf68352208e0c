# INVOICER/backend/scripts/seed_data.py : script pour générer des données de démo

#!/usr/bin/env python
"""Script pour générer des données de démo réalistes"""

import random
import sys
import os
from datetime import date, timedelta
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from invoicer.database import SessionLocal, create_tables
from invoicer.constants import STATUS_SENT, STATUS_PAID, STATUS_DRAFT
from invoicer.schemas import schemas
from invoicer.services.user_service import UserService
from invoicer.services.customer_service import CustomerService
from invoicer.services.product_service import ProductService
from invoicer.services.invoice_service import InvoiceService
from invoicer.services.business_profile_service import BusinessProfileService

def generate_test_data():
    """Génère des données de démo (à lancer sur une base vide)"""
    create_tables()
    db = SessionLocal()
    try:
        # Administrateur de démo
        UserService(db).create(schemas.UserCreate(
            username="admin",
            email="admin@tokomaju.co.id",
            password="admin123",
            role="admin"
        ))

        BusinessProfileService(db).create(schemas.BusinessProfileCreate(
            business_name="Toko Maju Jaya",
            address="Jl. Sudirman No. 10, Jakarta",
            phone="+62 21 555 0101",
            email="halo@tokomaju.co.id",
            tax_id="01.234.567.8-901.000",
            bank_accounts=[schemas.BankAccount(
                bank_name="BCA",
                account_number="1234567890",
                account_name="PT Toko Maju Jaya"
            )]
        ))

        customers = [
            CustomerService(db).create(schemas.CustomerCreate(
                name=f"Client {i+1}",
                email=f"client{i+1}@contoh.co.id",
                phone=f"+62 812 000 00{i}",
                address=f"Jl. Merdeka No. {i+1}, Bandung"
            ))
            for i in range(5)
        ]

        catalogue = [("Konsultasi", "jam", 250000), ("Desain logo", "paket", 1500000),
                     ("Hosting", "bulan", 100000), ("Pemeliharaan", "bulan", 500000)]
        products = [
            ProductService(db).create(schemas.ProductCreate(name=name, unit=unit, price=price))
            for name, unit, price in catalogue
        ]

        # Factures réparties sur les 60 derniers jours
        invoice_service = InvoiceService(db)
        for _ in range(12):
            issue = date.today() - timedelta(days=random.randint(0, 60))
            picked = random.sample(products, k=random.randint(1, 3))
            invoice = invoice_service.create(schemas.InvoiceCreate(
                customer_id=random.choice(customers).id,
                issue_date=issue,
                due_date=issue + timedelta(days=30),
                items=[
                    schemas.InvoiceItemIn(product_id=p.id, quantity=random.randint(1, 5), price=p.price)
                    for p in picked
                ]
            ))
            status = random.choice([STATUS_DRAFT, STATUS_SENT, STATUS_PAID])
            if status != STATUS_DRAFT:
                invoice_service.update_status(invoice.id, status)
    finally:
        db.close()

    print("✅ Données de démo générées avec succès!")
    print("👤 Administrateur de démo: admin / admin123")

if __name__ == "__main__":
    generate_test_data()
