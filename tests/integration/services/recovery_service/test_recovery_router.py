# tests/integration/services/recovery_service/test_recovery_router.py
import pytest
import pytest_asyncio
import httpx
from unittest.mock import AsyncMock

from src.services.recovery_service.app.main import app
from src.services.recovery_service.app.services.recovery_service import RecoveryService, get_recovery_service

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def async_test_client():
    """Provides an httpx.AsyncClient wired to the real calculator."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def mocked_service_client():
    """Provides an httpx.AsyncClient with the RecoveryService dependency mocked."""
    mock_service = AsyncMock(spec=RecoveryService)
    app.dependency_overrides[get_recovery_service] = lambda: mock_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, mock_service

    del app.dependency_overrides[get_recovery_service]


async def test_calculate_break_even_purchase(async_test_client):
    """
    GIVEN 100 shares at 10.00 trading at 5.00
    WHEN the caller asks to break even after a 50% rise
    THEN the router returns the purchase as JSON numbers.
    """
    payload = {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 5, "targetRise": 50}

    response = await async_test_client.post("/recovery/calculate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["qtyToBuy"] == 100
    assert body["investmentRequired"] == 500.0
    assert body["newAveragePrice"] == 7.5
    assert body["projectedPrice"] == 7.5
    assert body["projectedProfit"] == 0.0
    assert body["alreadyAboveTarget"] is False
    assert "failureReason" not in body


async def test_calculate_with_target_profit(async_test_client):
    payload = {
        "currentQuantity": 100,
        "averagePrice": "10",
        "currentPrice": "5",
        "targetRise": 60,
        "targetProfit": 5,
    }

    response = await async_test_client.post("/recovery/calculate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["qtyToBuy"] == 91
    assert body["investmentRequired"] == 455.0
    assert body["newAveragePrice"] == 7.62


async def test_calculate_failure_is_a_200_with_reason(async_test_client):
    payload = {"currentQuantity": 0, "averagePrice": 10, "currentPrice": 8, "targetRise": 25}

    response = await async_test_client.post("/recovery/calculate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"success", "failureReason", "message"}
    assert body["success"] is False
    assert body["failureReason"] == "NoExistingPosition"


async def test_calculate_domain_invalid_values_are_reported_not_rejected(async_test_client):
    payload = {"currentQuantity": 100, "averagePrice": -1, "currentPrice": 8, "targetRise": 25}

    response = await async_test_client.post("/recovery/calculate", json=payload)

    assert response.status_code == 200
    assert response.json()["failureReason"] == "InvalidInput"


async def test_calculate_missing_field_is_rejected(async_test_client):
    payload = {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 8}

    response = await async_test_client.post("/recovery/calculate", json=payload)

    assert response.status_code == 422


async def test_calculate_unexpected_error(mocked_service_client):
    client, mock_service = mocked_service_client
    mock_service.calculate.side_effect = RuntimeError("boom")

    payload = {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 8, "targetRise": 25}
    response = await client.post("/recovery/calculate", json=payload)

    assert response.status_code == 500
    assert "recovery calculation" in response.json()["detail"].lower()
    mock_service.calculate.assert_awaited_once()


async def test_plans_default_to_break_even_and_target_profit(async_test_client):
    payload = {"position": {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 8}}

    response = await async_test_client.post("/recovery/plans", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["diagnosis"]["currentDropPct"] == 20.0
    assert body["diagnosis"]["unrealizedLoss"] == 200.0
    assert body["diagnosis"]["breakEvenRisePct"] == 25.0
    assert body["diagnosis"]["isUnderwater"] is True
    assert [plan["label"] for plan in body["plans"]] == ["BREAK_EVEN", "TARGET_PROFIT"]
    assert body["plans"][0]["goal"]["targetRise"] == 25.0
    assert body["plans"][0]["result"]["qtyToBuy"] == 0
    assert body["plans"][1]["goal"]["targetRise"] == 35.0
    assert body["plans"][1]["goal"]["targetProfit"] == 5.0
    assert body["plans"][1]["result"]["success"] is True


async def test_plans_with_explicit_goals(async_test_client):
    payload = {
        "position": {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 5},
        "goals": [
            {"label": "even", "targetRise": 50},
            {"targetRise": 0, "targetProfit": 5},
        ],
    }

    response = await async_test_client.post("/recovery/plans", json=payload)

    assert response.status_code == 200
    plans = response.json()["plans"]
    assert [plan["label"] for plan in plans] == ["even", "GOAL_2"]
    assert plans[0]["result"]["qtyToBuy"] == 100
    assert plans[1]["result"]["failureReason"] == "NonPositiveRise"


async def test_plans_unexpected_error(mocked_service_client):
    client, mock_service = mocked_service_client
    mock_service.build_plans.side_effect = RuntimeError("boom")

    payload = {"position": {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 8}}
    response = await client.post("/recovery/plans", json=payload)

    assert response.status_code == 500
    assert "recovery plans" in response.json()["detail"].lower()


async def test_plans_for_a_very_large_position_still_answer_200(async_test_client):
    """
    GIVEN a well-formed position too large to diagnose to the cent
    WHEN plans are requested
    THEN the diagnosis is omitted and the plans are still returned.
    """
    payload = {"position": {"currentQuantity": 10**27, "averagePrice": 10, "currentPrice": 8}}

    response = await async_test_client.post("/recovery/plans", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert "diagnosis" not in body
    assert [plan["label"] for plan in body["plans"]] == ["BREAK_EVEN", "TARGET_PROFIT"]
    assert body["plans"][0]["result"]["success"] is True
