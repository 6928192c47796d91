"""
Integration tests for the analysis and transaction endpoints.

These tests verify:
1. POST /v1/analysis enriches, merges with history and persists a batch
2. GET /v1/transactions/latest returns the newest batch
3. POST /v1/transactions/refresh pulls from the bank and analyzes
4. Validation errors are rejected before any work is done
"""

import pytest
from httpx import AsyncClient

from .conftest import MockBankAPIClient, MockEnrichmentClient


# =============================================================================
# Analysis Endpoint Tests
# =============================================================================

class TestAnalysisEndpoint:
    """Tests for POST /v1/analysis endpoint."""

    @pytest.mark.asyncio
    async def test_analyze_returns_enriched_transactions(
        self,
        client: AsyncClient,
        factory_farm_purchase: dict,
        grocer_purchase: dict,
    ):
        response = await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [factory_farm_purchase, grocer_purchase]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user_1"
        assert data["pending_count"] == 0
        assert data["enriched"] == 2
        assert data["warnings"] == []
        assert data["batch_id"] is not None

        by_id = {tx["id"]: tx for tx in data["transactions"]}
        assert by_id["ext:t1"]["unethical_practices"] == ["Factory Farming"]
        assert by_id["ext:t1"]["societal_debt"] == 20.0
        assert by_id["ext:t2"]["societal_debt"] == -15.0

    @pytest.mark.asyncio
    async def test_reanalysis_uses_history_and_cache(
        self,
        client: AsyncClient,
        mock_enrichment_client: MockEnrichmentClient,
        factory_farm_purchase: dict,
    ):
        """Sending the same purchase twice never reaches the provider twice."""
        await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [factory_farm_purchase]},
        )
        response = await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [factory_farm_purchase]},
        )

        assert response.status_code == 200
        data = response.json()
        assert mock_enrichment_client.call_count == 1
        assert len(data["transactions"]) == 1
        assert data["transactions"][0]["analyzed"] is True

    @pytest.mark.asyncio
    async def test_new_user_gets_cached_vendor(
        self,
        client: AsyncClient,
        mock_enrichment_client: MockEnrichmentClient,
        factory_farm_purchase: dict,
    ):
        """The vendor cache is shared across users."""
        await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [factory_farm_purchase]},
        )
        response = await client.post(
            "/v1/analysis",
            json={
                "user_id": "user_2",
                "transactions": [{**factory_farm_purchase, "external_id": "u2-t1"}],
            },
        )

        data = response.json()
        assert mock_enrichment_client.call_count == 1
        assert data["cache_hits"] == 1
        assert data["enriched"] == 0

    @pytest.mark.asyncio
    async def test_partial_enrichment_returns_warning(
        self,
        client: AsyncClient,
        mock_enrichment_client: MockEnrichmentClient,
        factory_farm_purchase: dict,
        grocer_purchase: dict,
    ):
        mock_enrichment_client.drop_ids = {"ext:t2"}

        response = await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [factory_farm_purchase, grocer_purchase]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["pending_count"] == 1
        assert data["warnings"] == [
            {
                "code": "ENRICHMENT_PARTIAL",
                "message": data["warnings"][0]["message"],
                "transaction_ids": ["ext:t2"],
            }
        ]

    @pytest.mark.asyncio
    async def test_analyzed_input_is_kept(self, client: AsyncClient):
        """Caller-supplied analysis is never re-sent to the provider."""
        response = await client.post(
            "/v1/analysis",
            json={
                "user_id": "user_1",
                "transactions": [
                    {
                        "date": "2025-03-01",
                        "merchant_name": "Bike Shop",
                        "amount": 200.0,
                        "analyzed": True,
                        "ethical_practices": ["Local Business"],
                        "practice_weights": {"Local Business": 10},
                    }
                ],
            },
        )

        data = response.json()
        assert data["enriched"] == 0
        assert data["transactions"][0]["id"] == "2025-03-01-BIKE SHOP-200.00"
        assert data["transactions"][0]["societal_debt"] == -20.0

    @pytest.mark.asyncio
    async def test_missing_user_id_returns_422(self, client: AsyncClient):
        response = await client.post("/v1/analysis", json={"transactions": []})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_whitespace_user_id_returns_422(self, client: AsyncClient):
        response = await client.post("/v1/analysis", json={"user_id": "   ", "transactions": []})

        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "override",
        [
            {"amount": -5.0},
            {"date": "March 1st"},
            {"merchant_name": ""},
        ],
    )
    async def test_invalid_transaction_returns_422(
        self,
        client: AsyncClient,
        factory_farm_purchase: dict,
        override: dict,
    ):
        response = await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [{**factory_farm_purchase, **override}]},
        )

        assert response.status_code == 422


# =============================================================================
# Transactions Endpoint Tests
# =============================================================================

class TestTransactionsEndpoint:
    """Tests for /v1/transactions endpoints."""

    @pytest.mark.asyncio
    async def test_latest_returns_newest_batch(
        self,
        client: AsyncClient,
        factory_farm_purchase: dict,
        grocer_purchase: dict,
    ):
        await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [factory_farm_purchase]},
        )
        await client.post(
            "/v1/analysis",
            json={"user_id": "user_1", "transactions": [grocer_purchase]},
        )

        response = await client.get("/v1/transactions/latest", params={"user_id": "user_1"})

        assert response.status_code == 200
        data = response.json()
        assert [tx["id"] for tx in data["transactions"]] == ["ext:t1", "ext:t2"]
        assert all(tx["analyzed"] for tx in data["transactions"])

    @pytest.mark.asyncio
    async def test_latest_for_unknown_user_is_empty(self, client: AsyncClient):
        response = await client.get("/v1/transactions/latest", params={"user_id": "nobody"})

        assert response.status_code == 200
        assert response.json() == {"user_id": "nobody", "transactions": []}

    @pytest.mark.asyncio
    async def test_latest_requires_user_id(self, client: AsyncClient):
        response = await client.get("/v1/transactions/latest")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_refresh_from_bank(
        self,
        client: AsyncClient,
        mock_bank_client: MockBankAPIClient,
    ):
        response = await client.post("/v1/transactions/refresh", json={"user_id": "user_bank"})

        assert response.status_code == 200
        data = response.json()
        assert mock_bank_client.call_count == 1
        assert [tx["id"] for tx in data["transactions"]] == ["ext:plaid-1", "ext:plaid-2"]
        assert data["transactions"][1]["merchant_name"] == "Green Grocer"
        assert data["transactions"][1]["amount"] == 20.0
        assert data["pending_count"] == 0

    @pytest.mark.asyncio
    async def test_refresh_unknown_user_returns_404(self, client: AsyncClient):
        response = await client.post("/v1/transactions/refresh", json={"user_id": "user_missing"})

        assert response.status_code == 404
        assert response.json()["error"] == "USER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_refresh_bank_failure_returns_503(self, client_with_failing_bank: AsyncClient):
        response = await client_with_failing_bank.post(
            "/v1/transactions/refresh",
            json={"user_id": "user_bank"},
        )

        assert response.status_code == 503
        data = response.json()
        assert "error" in data
        assert "request_id" in data


# =============================================================================
# Health Endpoint Tests
# =============================================================================

class TestHealthEndpoint:
    """Tests for GET /v1/health endpoint."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "impact-ledger"
