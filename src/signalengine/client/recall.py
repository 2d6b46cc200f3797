"""
Async REST client for the Recall trading API.

Thin transport collaborator: fetches market data and balances, submits
trades. Every endpoint answers with the envelope
`{"success": bool, "data": ..., "error": str | None}`.

No retries are performed here; a failed request raises and the caller
decides what to do with it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiohttp
import orjson

from signalengine.contracts import (
    Balance,
    MarketData,
    TradeExecutionRequest,
    TradeExecutionResponse,
)
from signalengine.logging_config import log_trade

if TYPE_CHECKING:
    from signalengine.config import AgentConfig

logger = logging.getLogger(__name__)


class RecallApiError(Exception):
    """Recall API returned success=false or an unusable payload."""

    def __init__(self, endpoint: str, message: str, status: int | None = None) -> None:
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.status = status


class RecallClient:
    """
    Recall API client.

    Satisfies both MarketDataSource and TradeExecutor, so one instance can
    feed and drain a SignalPipeline.
    """

    def __init__(self, config: AgentConfig) -> None:
        """
        Initialize the client.

        Args:
            config: Agent configuration (base URL, API key, default chain, timeout).
        """
        self._config = config
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_s)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    "Authorization": f"Bearer {self._config.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request and unwrap the Recall envelope.

        Returns:
            The envelope's `data` field.

        Raises:
            RecallApiError: On HTTP error status or success=false.
            aiohttp.ClientError: On network errors.
        """
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        session = await self._get_session()
        data = orjson.dumps(payload) if payload is not None else None

        logger.debug("API request", extra={"method": method, "endpoint": endpoint})
        async with session.request(method, url, params=params, data=data) as response:
            body = await response.read()
            logger.debug("API response", extra={"endpoint": endpoint, "status": response.status})

            try:
                envelope = orjson.loads(body) if body else {}
            except orjson.JSONDecodeError as e:
                raise RecallApiError(endpoint, "invalid JSON response", response.status) from e

            if response.status >= 400:
                message = envelope.get("error") if isinstance(envelope, dict) else None
                message = message or f"HTTP {response.status}"
                raise RecallApiError(endpoint, message, response.status)

            if not isinstance(envelope, dict) or not envelope.get("success"):
                message = envelope.get("error") if isinstance(envelope, dict) else None
                raise RecallApiError(endpoint, message or "request failed", response.status)

            return envelope.get("data")

    def _chain_params(self, chain: str | None) -> dict[str, str]:
        return {"chain": chain} if chain else {}

    async def health_check(self) -> bool:
        """Check API health. Never raises."""
        url = f"{self._config.base_url.rstrip('/')}/api/health"
        try:
            session = await self._get_session()
            async with session.get(url) as response:
                healthy = response.status == 200
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("Health check failed", extra={"error": str(e)})
            return False
        logger.info("Health check", extra={"healthy": healthy})
        return healthy

    async def get_supported_chains(self) -> list[str]:
        """List chain identifiers supported by the API."""
        data = await self._request("GET", "/api/chains")
        return [str(chain) for chain in data or []]

    async def get_market_data(self, chain: str | None = None) -> list[MarketData]:
        """
        Fetch this cycle's market snapshot.

        Args:
            chain: Chain to query (all chains if None).

        Returns:
            One MarketData per token.
        """
        data = await self._request("GET", "/api/market-data", params=self._chain_params(chain))
        market_data = [MarketData.model_validate(item) for item in data or []]
        logger.info(
            "Fetched market data",
            extra={"chain": chain or "all", "count": len(market_data)},
        )
        return market_data

    async def get_token_price(self, token: str, chain: str | None = None) -> str:
        """Fetch the current price of one token as a decimal string."""
        params = {"token": token, **self._chain_params(chain)}
        data = await self._request("GET", "/api/price", params=params)
        if not isinstance(data, dict) or "price" not in data:
            raise RecallApiError("/api/price", "missing price in response")
        return str(data["price"])

    async def get_balances(self, chain: str | None = None) -> list[Balance]:
        """Fetch agent balances."""
        data = await self._request("GET", "/api/balances", params=self._chain_params(chain))
        balances = [Balance.model_validate(item) for item in data or []]
        logger.info("Fetched balances", extra={"count": len(balances)})
        return balances

    async def execute_trade(self, request: TradeExecutionRequest) -> TradeExecutionResponse:
        """
        Submit a trade.

        The request's chain falls back to the configured default chain.
        """
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        payload.setdefault("chain", self._config.default_chain)

        data = await self._request("POST", "/api/trade/execute", payload=payload)
        response = TradeExecutionResponse.model_validate(data)
        log_trade(logger, "Trade accepted", trade_id=response.trade_id, status=response.status)
        return response

    async def get_trade_history(
        self, limit: int = 50, chain: str | None = None
    ) -> list[dict[str, Any]]:
        """Fetch recent trades as raw dicts."""
        params = {"limit": str(limit), **self._chain_params(chain)}
        data = await self._request("GET", "/api/trades/history", params=params)
        return list(data or [])
