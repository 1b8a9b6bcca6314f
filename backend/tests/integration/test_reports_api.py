import pytest
from datetime import datetime, timedelta


class TestExpensesAPI:
    """Tests for expense CRUD."""

    @pytest.mark.asyncio
    async def test_crud(self, client, auth_headers, current_day):
        response = await client.post(
            "/api/v1/expenses",
            json={"concept": "Renta del local", "amount": 6500, "category": "Servicios"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        expense = response.json()
        assert expense["expense_date"] == current_day.isoformat()

        response = await client.patch(
            f"/api/v1/expenses/{expense['id']}",
            json={"amount": 7000},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["amount"] == 7000.0

        response = await client.delete(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)
        assert response.status_code == 204

        listing = await client.get("/api/v1/expenses", headers=auth_headers)
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, client, auth_headers):
        response = await client.post(
            "/api/v1/expenses",
            json={"concept": "Luz", "amount": 0},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_filters(self, client, auth_headers, current_day):
        old_date = (current_day - timedelta(days=60)).isoformat()
        await client.post(
            "/api/v1/expenses",
            json={"concept": "Luz", "amount": 850, "category": "Servicios", "expense_date": old_date},
            headers=auth_headers,
        )
        await client.post(
            "/api/v1/expenses",
            json={"concept": "Estuches", "amount": 420, "category": "Suministros"},
            headers=auth_headers,
        )

        recent = await client.get(
            f"/api/v1/expenses?date_from={(current_day - timedelta(days=7)).isoformat()}",
            headers=auth_headers,
        )
        by_category = await client.get("/api/v1/expenses?category=Servicios", headers=auth_headers)

        assert [e["concept"] for e in recent.json()] == ["Estuches"]
        assert [e["concept"] for e in by_category.json()] == ["Luz"]

    @pytest.mark.asyncio
    async def test_categories(self, client):
        response = await client.get("/api/v1/expenses/categories")

        assert "Publicidad" in response.json()


class TestStatsAPI:
    """Tests for dashboard and statistics read models."""

    @pytest.mark.asyncio
    async def test_summary(self, client, auth_headers, create_sale):
        await create_sale(unit_price=900)
        await client.post(
            "/api/v1/expenses",
            json={"concept": "Luz", "amount": 100},
            headers=auth_headers,
        )

        response = await client.get("/api/v1/stats/summary", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "total_products": 1,
            "available_products": 1,
            "total_sales": 900.0,
            "total_profit": 500.0,
            "total_expenses": 100.0,
            "net_profit": 400.0,
        }

    @pytest.mark.asyncio
    async def test_statistics(self, client, auth_headers, create_sale, current_day):
        await create_sale(unit_price=900)
        await create_sale(unit_price=900, quantity=2, name="Collar de plata", category="Collares")
        await client.post(
            "/api/v1/expenses",
            json={"concept": "Anuncios", "amount": 300, "category": "Publicidad"},
            headers=auth_headers,
        )

        response = await client.get("/api/v1/stats?period=7d", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "7d"
        assert data["totals"] == {
            "sales": 2700.0,
            "profit": 1500.0,
            "expenses": 300.0,
            "net_profit": 1200.0,
            "margin_percentage": 55.56,
        }
        assert data["sales_by_month"]["labels"] == [current_day.strftime("%Y-%m")]
        assert data["top_categories"]["labels"] == ["Collares", "Anillos"]
        assert data["top_categories"]["datasets"] == [{"label": "Piezas vendidas", "data": [2.0, 1.0]}]
        assert data["expenses_by_category"]["labels"] == ["Publicidad"]

    @pytest.mark.asyncio
    async def test_empty_statistics(self, client, auth_headers):
        response = await client.get("/api/v1/stats?period=all", headers=auth_headers)

        data = response.json()
        assert data["totals"]["margin_percentage"] == 0.0
        assert data["sales_by_month"] == {
            "labels": [],
            "datasets": [{"label": "Ventas", "data": []}, {"label": "Ganancia", "data": []}],
        }

    @pytest.mark.asyncio
    async def test_unknown_period(self, client, auth_headers):
        response = await client.get("/api/v1/stats?period=1y", headers=auth_headers)

        assert response.status_code == 422


class TestAuditAPI:
    """Tests for the synthesized audit log."""

    @pytest.mark.asyncio
    async def test_entries_from_every_source(self, client, auth_headers, create_sale):
        sale = await create_sale()
        await client.patch(
            f"/api/v1/products/{sale['product_id']}",
            json={"stock": 10},
            headers=auth_headers,
        )
        await client.post(
            "/api/v1/expenses",
            json={"concept": "Luz", "amount": 100},
            headers=auth_headers,
        )

        response = await client.get("/api/v1/audit", headers=auth_headers)

        assert response.status_code == 200
        entries = response.json()
        kinds = {(e["type"], e["action"]) for e in entries}
        assert kinds == {
            ("product", "create"),
            ("product", "update"),
            ("sale", "create"),
            ("expense", "create"),
            ("user", "create"),
            ("login", "login"),
        }
        dates = [datetime.fromisoformat(e["date"]) for e in entries]
        assert dates == sorted(dates, reverse=True)

    @pytest.mark.asyncio
    async def test_filters(self, client, auth_headers, create_sale):
        await create_sale()

        sales = await client.get("/api/v1/audit?type=sale", headers=auth_headers)
        search = await client.get("/api/v1/audit?search=maría", headers=auth_headers)

        assert len(sales.json()) == 1
        assert sales.json()[0]["user_email"] == "vendedora@aivi.mx"
        assert [e["type"] for e in search.json()] == ["sale"]

    @pytest.mark.asyncio
    async def test_deleted_product_sale(self, client, auth_headers, create_sale):
        sale = await create_sale()
        await client.delete(f"/api/v1/products/{sale['product_id']}", headers=auth_headers)

        response = await client.get("/api/v1/audit?type=sale", headers=auth_headers)

        assert response.json()[0]["details"]["product"] == "Deleted product"


class TestExtractAPI:

    @pytest.mark.asyncio
    async def test_extract(self, client):
        response = await client.post(
            "/api/v1/ai/extract",
            json={"text": "Anillo de oro 18k, se compró en 300, se vende en 800, 2 piezas"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Anillo de oro 18k"
        assert data["sale_price"] == 800.0
        assert data["stock"] == 2

    @pytest.mark.asyncio
    async def test_empty_text(self, client):
        response = await client.post("/api/v1/ai/extract", json={"text": ""})

        assert response.status_code == 400
        assert response.json()["detail"] == "Text is required"
