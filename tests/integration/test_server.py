from unittest.mock import AsyncMock

import pytest
from starlette.testclient import TestClient

from mcp_solana_agents.config import Settings
from mcp_solana_agents.errors import ToolExecutionError
from mcp_solana_agents.orchestrator import Orchestrator
from mcp_solana_agents.schema import ObjectSchema, StringSchema
from mcp_solana_agents.server import ANALYZER_AGENT, create_app
from mcp_solana_agents.tool import ConfiguredTool

TOKEN = "So11111111111111111111111111111111111111112"


@pytest.fixture(scope="function")
def analyze() -> AsyncMock:
    async def fake_analysis(params, context):
        return {
            "dex": "raydium",
            "marketAddress": params["marketAddress"],
            "liquidity": 0,
            "volume24h": 3,
            "price": 0,
            "timestamp": 1700000000000,
        }
    return AsyncMock(side_effect=fake_analysis)


@pytest.fixture(scope="function")
def orchestrator(mock_connection: AsyncMock, analyze: AsyncMock) -> Orchestrator:
    tool = ConfiguredTool(
        "analyzeMarket", "stub", ObjectSchema({"marketAddress": StringSchema()}), analyze
    )
    return Orchestrator(Settings(), mock_connection, tools=[tool])


@pytest.fixture(scope="function")
def client(orchestrator: Orchestrator) -> TestClient:
    return TestClient(create_app(orchestrator))


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_analyze_token(client: TestClient, orchestrator: Orchestrator, analyze: AsyncMock):
    response = client.post("/api/analyze-token", json={"tokenAddress": TOKEN})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["analysis"]["marketAddress"] == TOKEN
    assert body["analysis"]["volume24h"] == 3
    analyze.assert_awaited_once()
    assert orchestrator.get_agent(ANALYZER_AGENT) is not None


@pytest.mark.parametrize("payload", [{}, {"tokenAddress": ""}, {"token": TOKEN}])
def test_analyze_token_requires_address(client: TestClient, analyze: AsyncMock, payload):
    response = client.post("/api/analyze-token", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Token address is required"}
    analyze.assert_not_awaited()


def test_analyze_token_rejects_non_json_body(client: TestClient):
    response = client.post("/api/analyze-token", content=b"tokenAddress=abc")

    assert response.status_code == 400


def test_analyze_token_reports_tool_failure(client: TestClient, analyze: AsyncMock):
    analyze.side_effect = ToolExecutionError(f"No supported DEX found for market: {TOKEN}")

    response = client.post("/api/analyze-token", json={"tokenAddress": TOKEN})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": f"No supported DEX found for market: {TOKEN}",
    }


def test_analyze_token_reports_missing_tool(mock_connection: AsyncMock):
    client = TestClient(create_app(Orchestrator(Settings(), mock_connection)))

    response = client.post("/api/analyze-token", json={"tokenAddress": TOKEN})

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "analyzeMarket" in response.json()["error"]
