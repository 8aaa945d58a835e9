"""
API tests for pool, token, quote and health endpoints.

Tests cover:
- Registry listing
- Pool state with fresh reserves
- Quotes, including the from/to aliases and fee overrides
- Error responses (400, 422)
"""

from decimal import Decimal

from fastapi.testclient import TestClient

from tests.conftest import HEUR_ID, HUSD_ID, ONE, POOL_ACCOUNT_ID, POOL_KEY


class TestRegistryAPI:
    """Tests for GET /pools, /tokens and /health."""

    def test_list_pools(self, client: TestClient):
        response = client.get("/pools")

        assert response.status_code == 200
        pools = response.json()
        assert len(pools) == 1
        assert pools[0]["pool_key"] == POOL_KEY
        assert pools[0]["pool_account_id"] == POOL_ACCOUNT_ID
        assert pools[0]["token_a"] == {"symbol": "hUSD", "token_id": HUSD_ID, "decimals": 6}
        assert pools[0]["fee_bps"] == 30

    def test_list_tokens(self, client: TestClient):
        response = client.get("/tokens")
        assert response.status_code == 200
        assert [t["symbol"] for t in response.json()] == ["hEUR", "hUSD"]

    def test_health(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "network": "testnet", "pools": 1}

    def test_root(self, client: TestClient):
        assert client.get("/").json()["docs"] == "/docs"


class TestPoolStateAPI:
    """Tests for GET /pools/{pool_key}."""

    def test_unseeded_pool_state(self, client: TestClient):
        """
        GIVEN a registered pool with no balances
        WHEN I GET its state
        THEN both reserves and the issued units are zero
        """
        response = client.get(f"/pools/{POOL_KEY}")

        assert response.status_code == 200
        data = response.json()
        assert data["reserves"]["reserve_a"] == 0
        assert data["reserves"]["reserve_b"] == 0
        assert data["total_units"] == 0
        assert data["token_b"]["token_id"] == HEUR_ID

    def test_pool_state_reads_ledger(self, client: TestClient, stub_ledger):
        stub_ledger.credit(POOL_ACCOUNT_ID, HUSD_ID, 5 * ONE)
        data = client.get(f"/pools/{POOL_KEY}").json()
        assert data["reserves"]["reserve_a"] == 5 * ONE

    def test_unknown_pool(self, client: TestClient):
        response = client.get("/pools/hUSD-hGBP")

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestQuoteAPI:
    """Tests for GET /quote."""

    def _fund_pool(self, stub_ledger):
        stub_ledger.credit(POOL_ACCOUNT_ID, HUSD_ID, 1_000 * ONE)
        stub_ledger.credit(POOL_ACCOUNT_ID, HEUR_ID, 1_000 * ONE)

    def test_quote(self, client: TestClient, stub_ledger):
        """
        GIVEN a pool holding 1,000 of each token
        WHEN I GET /quote for 10 hUSD -> hEUR
        THEN the quoted output and minimum are returned in units and tokens
        """
        self._fund_pool(stub_ledger)

        response = client.get(
            "/quote",
            params={"pool_key": POOL_KEY, "from": "hUSD", "to": "hEUR", "amount": "10"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount_out_units"] == 9_871_580
        assert data["min_out_units"] == 9_822_222
        assert Decimal(data["amount_out"]) == Decimal("9.87158")
        assert data["token_in_id"] == HUSD_ID
        assert data["reserves"]["reserve_b"] == 1_000 * ONE

    def test_quote_fee_override(self, client: TestClient, stub_ledger):
        self._fund_pool(stub_ledger)
        params = {"pool_key": POOL_KEY, "from": "hUSD", "to": "hEUR", "amount": "10"}

        charged = client.get("/quote", params=params).json()
        free = client.get("/quote", params={**params, "fee_bps": 0}).json()

        assert free["fee_bps"] == 0
        assert free["amount_out_units"] > charged["amount_out_units"]

    def test_quote_floors_amounts_beyond_decimal_precision(self, client: TestClient, stub_ledger):
        self._fund_pool(stub_ledger)
        response = client.get(
            "/quote",
            params={"pool_key": POOL_KEY, "from": "hUSD", "to": "hEUR", "amount": "0." + "9" * 29},
        )
        assert response.status_code == 200
        assert response.json()["amount_in_units"] == 999_999

    def test_quote_unseeded_pool_returns_zero(self, client: TestClient):
        response = client.get(
            "/quote",
            params={"pool_key": POOL_KEY, "from": "hEUR", "to": "hUSD", "amount": "1"},
        )
        assert response.status_code == 200
        assert response.json()["amount_out_units"] == 0

    def test_quote_unsupported_pair(self, client: TestClient):
        response = client.get(
            "/quote",
            params={"pool_key": POOL_KEY, "from": "hUSD", "to": "hGBP", "amount": "1"},
        )
        assert response.status_code == 400

    def test_quote_missing_amount(self, client: TestClient):
        response = client.get("/quote", params={"pool_key": POOL_KEY, "from": "hUSD", "to": "hEUR"})
        assert response.status_code == 422

    def test_quote_bad_fee(self, client: TestClient, stub_ledger):
        self._fund_pool(stub_ledger)
        response = client.get(
            "/quote",
            params={"pool_key": POOL_KEY, "from": "hUSD", "to": "hEUR", "amount": "1", "fee_bps": 20_000},
        )
        assert response.status_code == 400
