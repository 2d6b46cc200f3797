"""Tests for RecallClient."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import orjson
import pytest

from signalengine.client import RecallApiError, RecallClient
from signalengine.config import AgentConfig
from signalengine.contracts import TradeExecutionRequest


@pytest.fixture
def config() -> AgentConfig:
    return AgentConfig(
        api_key="test-key",
        base_url="https://api.example.test/",
        default_chain="base",
    )


def make_response(status: int = 200, body: Any = None, raw: bytes | None = None) -> MagicMock:
    """Mock aiohttp response usable as an async context manager."""
    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=raw if raw is not None else orjson.dumps(body))
    response.__aenter__ = AsyncMock(return_value=response)
    response.__aexit__ = AsyncMock(return_value=None)
    return response


def envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


class TestRecallClientEndpoints:
    """Envelope unwrapping for each endpoint."""

    @pytest.mark.asyncio
    async def test_get_market_data(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        body = envelope(
            [
                {"token": "WETH", "price": 3500.5, "volume24h": "1000", "timestamp": 1},
                {"token": "WBTC", "price": "65000"},
            ]
        )
        mock_response = make_response(body=body)

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response) as req:
            market = await client.get_market_data("base")

        assert [m.token for m in market] == ["WETH", "WBTC"]
        assert market[0].price == "3500.5"
        assert market[0].volume_24h == "1000"
        args, kwargs = req.call_args
        assert args == ("GET", "https://api.example.test/api/market-data")
        assert kwargs["params"] == {"chain": "base"}
        await client.close()

    @pytest.mark.asyncio
    async def test_get_market_data_all_chains(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body=envelope([]))

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response) as req:
            market = await client.get_market_data()

        assert market == []
        assert req.call_args.kwargs["params"] == {}
        await client.close()

    @pytest.mark.asyncio
    async def test_get_supported_chains(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body=envelope(["ethereum", "base"]))

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            chains = await client.get_supported_chains()

        assert chains == ["ethereum", "base"]
        await client.close()

    @pytest.mark.asyncio
    async def test_get_token_price(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body=envelope({"price": 3500.25}))

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response) as req:
            price = await client.get_token_price("WETH", "base")

        assert price == "3500.25"
        assert req.call_args.kwargs["params"] == {"token": "WETH", "chain": "base"}
        await client.close()

    @pytest.mark.asyncio
    async def test_get_token_price_missing(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body=envelope({}))

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(RecallApiError, match="missing price"),
        ):
            await client.get_token_price("WETH")
        await client.close()

    @pytest.mark.asyncio
    async def test_get_balances(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        body = envelope([{"token": "USDC", "amount": 1000, "chain": "base", "value": "1000"}])
        mock_response = make_response(body=body)

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            balances = await client.get_balances("base")

        assert len(balances) == 1
        assert balances[0].token == "USDC"
        assert balances[0].amount == "1000"
        await client.close()

    @pytest.mark.asyncio
    async def test_execute_trade_applies_default_chain(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(
            body=envelope({"tradeId": "t-1", "status": "completed", "transactionHash": "0xabc"})
        )
        request = TradeExecutionRequest(
            from_token="USDC", to_token="WETH", amount=Decimal("40"), reason="buy signal: x"
        )

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response) as req:
            response = await client.execute_trade(request)

        assert response.trade_id == "t-1"
        assert response.transaction_hash == "0xabc"
        args, kwargs = req.call_args
        assert args == ("POST", "https://api.example.test/api/trade/execute")
        assert orjson.loads(kwargs["data"]) == {
            "fromToken": "USDC",
            "toToken": "WETH",
            "amount": "40",
            "reason": "buy signal: x",
            "chain": "base",
        }
        await client.close()

    @pytest.mark.asyncio
    async def test_execute_trade_keeps_request_chain(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body=envelope({"tradeId": "t-2", "status": "pending"}))
        request = TradeExecutionRequest(
            from_token="WETH", to_token="USDC", amount=Decimal("1"), chain="ethereum"
        )

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response) as req:
            await client.execute_trade(request)

        assert orjson.loads(req.call_args.kwargs["data"])["chain"] == "ethereum"
        await client.close()

    @pytest.mark.asyncio
    async def test_get_trade_history(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body=envelope([{"id": "t-1"}, {"id": "t-2"}]))

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response) as req:
            trades = await client.get_trade_history(2, "base")

        assert [t["id"] for t in trades] == ["t-1", "t-2"]
        assert req.call_args.kwargs["params"] == {"limit": "2", "chain": "base"}
        await client.close()


class TestRecallClientErrors:
    """Failure envelopes and HTTP errors."""

    @pytest.mark.asyncio
    async def test_success_false_raises(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(body={"success": False, "error": "insufficient balance"})

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(RecallApiError, match="insufficient balance"),
        ):
            await client.get_balances()
        await client.close()

    @pytest.mark.asyncio
    async def test_http_error_raises_with_status(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(status=401, body={"success": False, "error": "unauthorized"})

        with patch.object(aiohttp.ClientSession, "request", return_value=mock_response):
            with pytest.raises(RecallApiError) as exc_info:
                await client.get_supported_chains()

        assert exc_info.value.status == 401
        assert exc_info.value.endpoint == "/api/chains"
        await client.close()

    @pytest.mark.asyncio
    async def test_http_error_without_body(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(status=503, raw=b"")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(RecallApiError, match="HTTP 503"),
        ):
            await client.get_market_data()
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(raw=b"<html>")

        with (
            patch.object(aiohttp.ClientSession, "request", return_value=mock_response),
            pytest.raises(RecallApiError, match="invalid JSON"),
        ):
            await client.get_market_data()
        await client.close()

    @pytest.mark.asyncio
    async def test_network_error_propagates(self, config: AgentConfig) -> None:
        client = RecallClient(config)

        with (
            patch.object(
                aiohttp.ClientSession,
                "request",
                side_effect=aiohttp.ClientConnectionError("refused"),
            ),
            pytest.raises(aiohttp.ClientError),
        ):
            await client.get_market_data()
        await client.close()


class TestRecallClientHealth:
    """health_check never raises."""

    @pytest.mark.asyncio
    async def test_healthy(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(status=200, body={"status": "ok"})

        with patch.object(aiohttp.ClientSession, "get", return_value=mock_response) as get:
            assert await client.health_check() is True

        get.assert_called_once_with("https://api.example.test/api/health")
        await client.close()

    @pytest.mark.asyncio
    async def test_unhealthy_status(self, config: AgentConfig) -> None:
        client = RecallClient(config)
        mock_response = make_response(status=500, body={})

        with patch.object(aiohttp.ClientSession, "get", return_value=mock_response):
            assert await client.health_check() is False
        await client.close()

    @pytest.mark.asyncio
    async def test_connection_error(self, config: AgentConfig) -> None:
        client = RecallClient(config)

        with patch.object(
            aiohttp.ClientSession, "get", side_effect=aiohttp.ClientConnectionError("down")
        ):
            assert await client.health_check() is False
        await client.close()


class TestRecallClientSession:
    """Session lifecycle."""

    @pytest.mark.asyncio
    async def test_session_carries_bearer_header(self, config: AgentConfig) -> None:
        client = RecallClient(config)

        session = await client._get_session()

        assert session.headers["Authorization"] == "Bearer test-key"
        assert await client._get_session() is session
        await client.close()
        assert client._session is None

    @pytest.mark.asyncio
    async def test_close_without_session(self, config: AgentConfig) -> None:
        client = RecallClient(config)

        await client.close()
