# INVOICER/backend/tests/test_invoices.py : tests pour les factures

import re
from datetime import datetime
import pytest

class TestInvoices:
    @pytest.fixture(autouse=True)
    def setup(self, client, admin_headers):
        self.client = client
        self.headers = admin_headers
        self.customer = self._post("/customers", {
            "name": "PT Sinar Abadi",
            "email": "kontak@sinarabadi.co.id",
            "address": "Jl. Gatot Subroto No. 5, Jakarta"
        })
        self.product = self._post("/products", {"name": "Hosting", "price": 100000, "unit": "bulan"})
        self.other_product = self._post("/products", {"name": "Domain", "price": 150000, "unit": "tahun"})

    def _post(self, url, payload):
        response = self.client.post(url, json=payload, headers=self.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    def _payload(self, items=None, **overrides):
        payload = {
            "customerId": self.customer["id"],
            "issueDate": "2025-05-14",
            "dueDate": "2025-06-13",
            "items": items or [{"productId": self.product["id"], "quantity": 2, "price": 100000}]
        }
        payload.update(overrides)
        return payload

    def _create_invoice(self, **overrides):
        return self._post("/invoices", self._payload(**overrides))

    # ---------- Création ----------
    def test_create_invoice_end_to_end(self):
        data = self._create_invoice()

        assert data["status"] == "draft"
        assert data["subtotal"] == 200000
        assert data["taxAmount"] == 22000
        assert data["totalAmount"] == 222000
        assert data["customer"]["name"] == "PT Sinar Abadi"
        assert len(data["items"]) == 1
        assert data["items"][0]["total"] == 200000
        assert data["items"][0]["product"]["name"] == "Hosting"

        prefix = datetime.now().strftime("INV/%Y%m/")
        assert re.fullmatch(r"INV/\d{6}/\d{4}", data["number"])
        assert data["number"] == f"{prefix}0001"

    def test_numbers_increase_within_month(self):
        numbers = [self._create_invoice()["number"] for _ in range(3)]
        assert [n.rsplit("/", 1)[1] for n in numbers] == ["0001", "0002", "0003"]
        assert len(set(numbers)) == 3

    def test_totals_with_several_items(self):
        data = self._create_invoice(items=[
            {"productId": self.product["id"], "quantity": 3, "price": "99999.99"},
            {"productId": self.other_product["id"], "quantity": 1, "price": 150000}
        ])
        assert data["subtotal"] == 449999.97
        assert data["taxAmount"] == 49500.00
        assert data["totalAmount"] == 499499.97
        assert [item["total"] for item in data["items"]] == [299999.97, 150000]

    def test_same_product_twice_gives_two_lines(self):
        """Un produit répété reste deux lignes distinctes, chacune à son prix"""
        data = self._create_invoice(items=[
            {"productId": self.product["id"], "quantity": 1, "price": 100000},
            {"productId": self.product["id"], "quantity": 2, "price": 90000}
        ])
        assert [(i["productId"], i["total"]) for i in data["items"]] == [
            (self.product["id"], 100000),
            (self.product["id"], 180000)
        ]
        assert data["subtotal"] == 280000

    def test_client_totals_are_ignored(self):
        data = self._create_invoice(subtotal=1, taxAmount=1, totalAmount=1, status="paid")
        assert data["totalAmount"] == 222000
        assert data["status"] == "draft"

    def test_create_invoice_unknown_customer(self):
        response = self.client.post("/invoices", json=self._payload(customerId=999), headers=self.headers)
        assert response.status_code == 404

    def test_create_invoice_unknown_product(self):
        response = self.client.post("/invoices", json=self._payload(
            items=[{"productId": 999, "quantity": 1, "price": 1000}]
        ), headers=self.headers)
        assert response.status_code == 404
        assert self.client.get("/invoices", headers=self.headers).json()["meta"]["total"] == 0

    def test_create_invoice_without_items(self):
        payload = self._payload()
        payload["items"] = []
        response = self.client.post("/invoices", json=payload, headers=self.headers)
        assert response.status_code == 400

    def test_create_invoice_invalid_quantity(self):
        response = self.client.post("/invoices", json=self._payload(
            items=[{"productId": self.product["id"], "quantity": 0, "price": 1000}]
        ), headers=self.headers)
        assert response.status_code == 400

    # ---------- Lecture ----------
    def test_get_invoice_not_found(self):
        response = self.client.get("/invoices/999", headers=self.headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Facture introuvable", "error": True}

    def test_list_invoices_filters(self):
        other = self._post("/customers", {
            "name": "CV Melati",
            "email": "info@melati.co.id",
            "address": "Jl. Braga No. 12, Bandung"
        })
        first = self._create_invoice(issueDate="2025-01-10")
        self._create_invoice(issueDate="2025-03-10")
        third = self._create_invoice(customerId=other["id"], issueDate="2025-05-10")
        self.client.put(f"/invoices/{first['id']}/status", json={"status": "sent"}, headers=self.headers)

        body = self.client.get("/invoices", headers=self.headers).json()
        assert body["meta"]["total"] == 3
        # Les plus récentes d'abord
        assert body["data"][0]["id"] == third["id"]

        body = self.client.get("/invoices?status=sent", headers=self.headers).json()
        assert [i["id"] for i in body["data"]] == [first["id"]]

        body = self.client.get(f"/invoices?customerId={other['id']}", headers=self.headers).json()
        assert [i["id"] for i in body["data"]] == [third["id"]]

        body = self.client.get("/invoices?search=melati", headers=self.headers).json()
        assert [i["id"] for i in body["data"]] == [third["id"]]

        body = self.client.get("/invoices?startDate=2025-03-01", headers=self.headers).json()
        assert body["meta"]["total"] == 2

        body = self.client.get("/invoices?endDate=2025-03-31", headers=self.headers).json()
        assert body["meta"]["total"] == 2

        body = self.client.get("/invoices?startDate=2025-02-01&endDate=2025-04-01", headers=self.headers).json()
        assert body["meta"]["total"] == 1

        body = self.client.get("/invoices?limit=2&page=2", headers=self.headers).json()
        assert len(body["data"]) == 1
        assert body["meta"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}

    def test_download_pdf(self):
        self._post("/business-profile", {
            "businessName": "Toko Maju Jaya",
            "address": "Jl. Sudirman No. 10, Jakarta",
            "phone": "+62 21 555 0101",
            "email": "halo@tokomaju.co.id",
            "bankAccounts": [{"bankName": "BCA", "accountNumber": "1234567890", "accountName": "Toko Maju"}]
        })
        invoice = self._create_invoice(notes="Merci <b>pour</b> votre confiance")

        response = self.client.get(f"/invoices/{invoice['id']}/pdf", headers=self.headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert invoice["number"].replace("/", "-") in response.headers["content-disposition"]

    def test_download_pdf_without_business_profile(self):
        invoice = self._create_invoice()
        response = self.client.get(f"/invoices/{invoice['id']}/pdf", headers=self.headers)
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")

    # ---------- Mise à jour ----------
    def test_update_replaces_items_and_recomputes(self):
        invoice = self._create_invoice(items=[
            {"productId": self.product["id"], "quantity": 1, "price": 100000},
            {"productId": self.other_product["id"], "quantity": 1, "price": 150000}
        ])

        response = self.client.put(f"/invoices/{invoice['id']}", json={
            "items": [{"productId": self.other_product["id"], "quantity": 4, "price": 50000}],
            "notes": "Remise appliquée"
        }, headers=self.headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["items"]) == 1
        assert data["items"][0]["productId"] == self.other_product["id"]
        assert data["subtotal"] == 200000
        assert data["taxAmount"] == 22000
        assert data["totalAmount"] == 222000
        assert data["notes"] == "Remise appliquée"
        assert data["number"] == invoice["number"]

    def test_update_without_items_keeps_totals(self):
        invoice = self._create_invoice()
        response = self.client.put(f"/invoices/{invoice['id']}", json={"dueDate": "2025-07-01"}, headers=self.headers)
        data = response.json()["data"]
        assert data["dueDate"] == "2025-07-01"
        assert data["totalAmount"] == 222000
        assert len(data["items"]) == 1

    def test_update_with_unknown_product_changes_nothing(self):
        invoice = self._create_invoice()
        response = self.client.put(f"/invoices/{invoice['id']}", json={
            "items": [{"productId": 999, "quantity": 1, "price": 1}]
        }, headers=self.headers)
        assert response.status_code == 404

        data = self.client.get(f"/invoices/{invoice['id']}", headers=self.headers).json()
        assert data["totalAmount"] == 222000
        assert len(data["items"]) == 1

    def test_update_with_unknown_customer_changes_nothing(self):
        invoice = self._create_invoice()
        response = self.client.put(f"/invoices/{invoice['id']}", json={"customerId": 999}, headers=self.headers)
        assert response.status_code == 404
        assert response.json()["error"] is True

        data = self.client.get(f"/invoices/{invoice['id']}", headers=self.headers).json()
        assert data["customerId"] == self.customer["id"]

    def test_update_moves_invoice_to_another_customer(self):
        other = self._post("/customers", {
            "name": "CV Melati",
            "email": "info@melati.co.id",
            "address": "Jl. Braga No. 12, Bandung"
        })
        invoice = self._create_invoice()
        response = self.client.put(f"/invoices/{invoice['id']}", json={"customerId": other["id"]}, headers=self.headers)
        assert response.status_code == 200
        assert response.json()["data"]["customer"]["name"] == "CV Melati"

    def test_update_with_invalid_status(self):
        invoice = self._create_invoice()
        response = self.client.put(f"/invoices/{invoice['id']}", json={"status": "archived"}, headers=self.headers)
        assert response.status_code == 400

    def test_update_not_found(self):
        response = self.client.put("/invoices/999", json={"notes": "x"}, headers=self.headers)
        assert response.status_code == 404

    # ---------- Statuts ----------
    def test_status_transitions(self):
        invoice = self._create_invoice()
        url = f"/invoices/{invoice['id']}/status"

        assert self.client.put(url, json={"status": "sent"}, headers=self.headers).json()["data"]["status"] == "sent"
        assert self.client.put(url, json={"status": "draft"}, headers=self.headers).json()["data"]["status"] == "draft"
        assert self.client.put(url, json={"status": "cancelled"}, headers=self.headers).json()["data"]["status"] == "cancelled"

        # Une facture annulée reste modifiable
        response = self.client.put(f"/invoices/{invoice['id']}", json={"status": "draft"}, headers=self.headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "draft"

    def test_invalid_status(self):
        invoice = self._create_invoice()
        response = self.client.put(f"/invoices/{invoice['id']}/status", json={"status": "archived"}, headers=self.headers)
        assert response.status_code == 400
        assert self.client.get(f"/invoices/{invoice['id']}", headers=self.headers).json()["status"] == "draft"

    def test_paid_invoice_is_locked(self):
        invoice = self._create_invoice()
        url = f"/invoices/{invoice['id']}"
        response = self.client.put(f"{url}/status", json={"status": "paid"}, headers=self.headers)
        assert response.status_code == 200

        response = self.client.put(url, json={"notes": "modifiée"}, headers=self.headers)
        assert response.status_code == 400
        assert response.json()["error"] is True

        response = self.client.put(url, json={
            "items": [{"productId": self.product["id"], "quantity": 9, "price": 1}]
        }, headers=self.headers)
        assert response.status_code == 400

        response = self.client.put(f"{url}/status", json={"status": "draft"}, headers=self.headers)
        assert response.status_code == 400

        response = self.client.delete(url, headers=self.headers)
        assert response.status_code == 400

        data = self.client.get(url, headers=self.headers).json()
        assert data["status"] == "paid"
        assert data["notes"] is None
        assert data["totalAmount"] == 222000

    # ---------- Suppression ----------
    def test_delete_invoice(self):
        invoice = self._create_invoice()
        response = self.client.delete(f"/invoices/{invoice['id']}", headers=self.headers)
        assert response.status_code == 200
        assert self.client.get(f"/invoices/{invoice['id']}", headers=self.headers).status_code == 404

    def test_deleted_number_is_not_reused(self):
        self._create_invoice()
        second = self._create_invoice()
        self._create_invoice()
        self.client.delete(f"/invoices/{second['id']}", headers=self.headers)

        # Le trou laissé par 0002 reste un trou
        fourth = self._create_invoice()
        assert fourth["number"].endswith("/0004")

    def test_requires_authentication(self):
        response = self.client.get("/invoices")
        assert response.status_code == 401
