"""Chainlink price feed source over Ethereum JSON-RPC."""

from typing import Any

import httpx

from swaproute.core.base import PipelineContext
from swaproute.core.errors import ConfigurationError, PriceSourceError, TransientRPCError
from swaproute.core.retry import RETRYABLE_RPC_ERRORS, with_retry
from swaproute.models.api import PriceQuote, Token
from swaproute.sources.base import PriceSource
from swaproute.utils.logging import get_logger

logger = get_logger(__name__)

# keccak256("latestAnswer()")[:4]
LATEST_ANSWER_SELECTOR = "0x50d25bcd"

INT256_MODULUS = 1 << 256
INT256_SIGN_BIT = 1 << 255


class RPCError(PriceSourceError):
    """The node answered with a JSON-RPC error object."""


def decode_int256(result: str) -> int:
    if not isinstance(result, str) or not result.startswith("0x") or len(result) <= 2:
        raise RPCError(f"Unexpected eth_call result: {result!r}")
    try:
        value = int(result, 16)
    except ValueError:
        raise RPCError(f"Unexpected eth_call result: {result!r}") from None
    if value >= INT256_SIGN_BIT:
        value -= INT256_MODULUS
    return value


class ChainlinkSource(PriceSource):
    """Reads ``latestAnswer()`` from each token's Chainlink aggregator.

    Every answer is scaled by the token's ``decimals``; with the default
    feeds that yields USD prices for all tokens.
    """

    def __init__(
        self,
        context: PipelineContext,
        rpc_url: str | None = None,
    ):
        """Initialize the Chainlink source.

        Args:
            context: Pipeline context (timeout, settings)
            rpc_url: JSON-RPC endpoint, defaults to ``settings.rpc_url``

        Raises:
            ConfigurationError: If no RPC endpoint is configured
        """
        self.context = context
        self.rpc_url = rpc_url or context.settings.rpc_url
        if not self.rpc_url:
            raise ConfigurationError("No RPC endpoint configured (set SWAPROUTE_RPC_URL or rpc_url in swaproute.toml)")
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0

    @property
    def name(self) -> str:
        return "chainlink"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.context.http_timeout,
                http2=True,
            )
        return self._client

    @with_retry()
    async def _post(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "method": method, "params": params, "id": self._request_id}

        client = await self._get_client()
        r = await client.post(self.rpc_url, json=payload)

        if r.status_code == 429 or r.status_code >= 500:
            raise TransientRPCError(f"RPC HTTP {r.status_code}")

        r.raise_for_status()
        data = r.json()
        if "error" in data:
            raise RPCError(str(data["error"]))
        return data.get("result")

    async def block_number(self) -> int:
        result = await self._post("eth_blockNumber", [])
        return int(result, 16)

    async def latest_answer(self, feed: str) -> int:
        result = await self._post("eth_call", [{"to": feed, "data": LATEST_ANSWER_SELECTOR}, "latest"])
        return decode_int256(result)

    async def get_price(self, token: Token) -> PriceQuote:
        if not token.feed:
            return PriceQuote.unavailable(token.symbol, "no price feed configured")

        try:
            raw = await self.latest_answer(token.feed)
        except RPCError as e:
            logger.error(f"{token.symbol} price fetch failed: {e}")
            return PriceQuote.unavailable(token.symbol, str(e))
        except (httpx.HTTPError, *RETRYABLE_RPC_ERRORS) as e:
            logger.error(f"{token.symbol} price fetch failed: {e}")
            return PriceQuote.transient(token.symbol, str(e) or type(e).__name__)

        price = raw / 10**token.decimals
        if price <= 0:
            logger.warning(f"{token.symbol} feed returned non-positive answer {raw}")
            return PriceQuote.unavailable(token.symbol, f"non-positive answer {raw}")

        logger.debug(f"{token.symbol} = {price}")
        return PriceQuote.of(token.symbol, price)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
