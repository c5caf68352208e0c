# INVOICER/backend/tests/test_customers.py : tests pour les clients

import pytest

class TestCustomers:
    @pytest.fixture(autouse=True)
    def setup(self, client, admin_headers):
        self.client = client
        self.headers = admin_headers

    def _create_customer(self, name="PT Sinar Abadi", email="kontak@sinarabadi.co.id"):
        response = self.client.post("/customers", json={
            "name": name,
            "email": email,
            "phone": "+62 21 555 0199",
            "address": "Jl. Gatot Subroto No. 5, Jakarta"
        }, headers=self.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    def _create_invoice(self, customer_id):
        product = self.client.post("/products", json={
            "name": "Konsultasi", "unit": "jam", "price": 250000
        }, headers=self.headers).json()["data"]
        response = self.client.post("/invoices", json={
            "customerId": customer_id,
            "issueDate": "2025-05-14",
            "dueDate": "2025-06-13",
            "items": [{"productId": product["id"], "quantity": 1, "price": 250000}]
        }, headers=self.headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    def test_create_customer(self):
        data = self._create_customer()
        assert data["name"] == "PT Sinar Abadi"
        assert data["email"] == "kontak@sinarabadi.co.id"
        assert data["id"] is not None
        assert "createdAt" in data

    def test_create_customer_duplicate_email(self):
        self._create_customer()
        response = self.client.post("/customers", json={
            "name": "Autre client",
            "email": "kontak@sinarabadi.co.id",
            "address": "Jl. Asia Afrika No. 8, Bandung"
        }, headers=self.headers)
        assert response.status_code == 400
        assert response.json()["error"] is True

    def test_create_customer_missing_fields(self):
        response = self.client.post("/customers", json={"name": "X"}, headers=self.headers)
        assert response.status_code == 400

    def test_list_customers_with_search_and_pagination(self):
        for i in range(3):
            self._create_customer(name=f"Toko Budi {i}", email=f"budi{i}@tokobudi.co.id")
        self._create_customer(name="CV Melati", email="info@melati.co.id")

        response = self.client.get("/customers?limit=2", headers=self.headers)
        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["meta"] == {"total": 4, "page": 1, "limit": 2, "totalPages": 2}

        response = self.client.get("/customers?search=budi", headers=self.headers)
        assert response.json()["meta"]["total"] == 3

        response = self.client.get("/customers?search=MELATI", headers=self.headers)
        assert [c["name"] for c in response.json()["data"]] == ["CV Melati"]

    def test_get_customer_with_invoices(self):
        customer = self._create_customer()
        invoice = self._create_invoice(customer["id"])

        response = self.client.get(f"/customers/{customer['id']}", headers=self.headers)
        assert response.status_code == 200
        invoices = response.json()["invoices"]
        assert len(invoices) == 1
        assert invoices[0]["number"] == invoice["number"]
        assert invoices[0]["totalAmount"] == 277500

    def test_get_customer_not_found(self):
        response = self.client.get("/customers/999", headers=self.headers)
        assert response.status_code == 404
        assert response.json()["error"] is True

    def test_update_customer(self):
        customer = self._create_customer()
        response = self.client.put(f"/customers/{customer['id']}", json={
            "name": "PT Sinar Abadi Jaya",
            "phone": None
        }, headers=self.headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "PT Sinar Abadi Jaya"
        assert data["phone"] is None
        assert data["email"] == customer["email"]

    def test_update_customer_email_taken(self):
        self._create_customer()
        other = self._create_customer(name="CV Melati", email="info@melati.co.id")
        response = self.client.put(f"/customers/{other['id']}", json={
            "email": "kontak@sinarabadi.co.id"
        }, headers=self.headers)
        assert response.status_code == 400

    def test_delete_customer(self):
        customer = self._create_customer()
        response = self.client.delete(f"/customers/{customer['id']}", headers=self.headers)
        assert response.status_code == 200
        assert self.client.get(f"/customers/{customer['id']}", headers=self.headers).status_code == 404

    def test_delete_customer_with_invoices_is_refused(self):
        customer = self._create_customer()
        invoice = self._create_invoice(customer["id"])

        response = self.client.delete(f"/customers/{customer['id']}", headers=self.headers)
        assert response.status_code == 400
        assert self.client.get(f"/customers/{customer['id']}", headers=self.headers).status_code == 200

        # Une fois la facture supprimée, le client peut partir
        self.client.delete(f"/invoices/{invoice['id']}", headers=self.headers)
        response = self.client.delete(f"/customers/{customer['id']}", headers=self.headers)
        assert response.status_code == 200
