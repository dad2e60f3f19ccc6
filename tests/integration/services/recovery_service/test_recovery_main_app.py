from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio

from src.services.recovery_service.app.main import app, lifespan

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def async_test_client():
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def test_middleware_preserves_incoming_correlation_id(async_test_client):
    response = await async_test_client.get(
        "/health/live", headers={"X-Correlation-ID": "corr-123", "X-Request-Id": "req-9"}
    )

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == "corr-123"
    assert response.headers["X-Request-Id"] == "req-9"
    assert response.headers["X-Trace-Id"]


async def test_middleware_generates_correlation_id_when_missing(async_test_client):
    with patch(
        "src.services.recovery_service.app.main.generate_correlation_id", return_value="RCV-abc"
    ):
        response = await async_test_client.get("/health/live")

    assert response.status_code == 200
    assert response.headers["X-Correlation-ID"] == "RCV-abc"


async def test_global_exception_handler_returns_standard_payload(async_test_client):
    async def boom():
        raise RuntimeError("boom")

    app.add_api_route("/_test_raise", boom, methods=["GET"])
    try:
        response = await async_test_client.get(
            "/_test_raise", headers={"X-Correlation-ID": "corr-500"}
        )
    finally:
        app.router.routes = [
            r for r in app.router.routes if getattr(r, "path", None) != "/_test_raise"
        ]

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Internal Server Error"
    assert body["correlation_id"] == "corr-500"


async def test_middleware_reads_correlation_id_case_insensitively(async_test_client):
    response = await async_test_client.get("/health/live", headers={"x-correlation-id": "corr-lower"})

    assert response.headers["X-Correlation-ID"] == "corr-lower"


async def test_global_exception_handler_generates_correlation_id_when_missing(async_test_client):
    async def boom():
        raise RuntimeError("boom")

    app.add_api_route("/_test_raise_no_id", boom, methods=["GET"])
    try:
        with patch(
            "src.services.recovery_service.app.main.generate_correlation_id", return_value="RCV-err"
        ):
            response = await async_test_client.get("/_test_raise_no_id")
    finally:
        app.router.routes = [
            r for r in app.router.routes if getattr(r, "path", None) != "/_test_raise_no_id"
        ]

    assert response.status_code == 500
    assert response.json()["correlation_id"] == "RCV-err"


async def test_health_probes_report_alive_and_ready(async_test_client):
    live = await async_test_client.get("/health/live")
    ready = await async_test_client.get("/health/ready")

    assert live.json() == {"status": "alive"}
    assert ready.status_code == 200
    assert ready.json() == {"status": "ready", "dependencies": {}}


async def test_lifespan_logs_startup_and_shutdown():
    with patch("src.services.recovery_service.app.main.logger.info") as logger_info:
        async with lifespan(app):
            pass

    logged_messages = [args[0] for args, _ in logger_info.call_args_list]
    assert "Recovery Service starting up..." in logged_messages
    assert any("shutting down" in message for message in logged_messages)
    assert "Recovery Service has shut down gracefully." in logged_messages


async def test_openapi_declares_metrics_as_text_plain(async_test_client):
    response = await async_test_client.get("/openapi.json")

    assert response.status_code == 200
    metrics_content = response.json()["paths"]["/metrics"]["get"]["responses"]["200"]["content"]
    assert "text/plain" in metrics_content
    assert "application/json" not in metrics_content


async def test_openapi_declares_recovery_endpoints(async_test_client):
    response = await async_test_client.get("/openapi.json")
    paths = response.json()["paths"]

    assert "422" in paths["/recovery/calculate"]["post"]["responses"]
    assert "422" in paths["/recovery/plans"]["post"]["responses"]


async def test_metrics_include_http_and_recovery_series(async_test_client):
    payload = {"currentQuantity": 100, "averagePrice": 10, "currentPrice": 8, "targetRise": 25}
    traffic_response = await async_test_client.post("/recovery/calculate", json=payload)
    assert traffic_response.status_code == 200

    metrics_response = await async_test_client.get("/metrics")
    assert metrics_response.status_code == 200

    metrics_text = metrics_response.text
    assert "http_requests_total{" in metrics_text
    assert "http_request_latency_seconds_count{" in metrics_text
    assert 'recovery_calculations_total{outcome="SUCCESS"}' in metrics_text
    assert "recovery_calculation_duration_seconds_count" in metrics_text
