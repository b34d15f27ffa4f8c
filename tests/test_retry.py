from __future__ import annotations

import logging

import httpx
import pytest

from swaproute.core.errors import PriceSourceError, TransientRPCError
from swaproute.core.retry import with_retry


class FakeNode:
    def __init__(self, failures: list[Exception]):
        self.failures = list(failures)
        self.calls: list[str] = []

    @with_retry(max_attempts=3, min_wait=0.01, max_wait=0.02)
    async def call(self, method: str, params: list) -> str:
        self.calls.append(method)
        if self.failures:
            raise self.failures.pop(0)
        return "0x1"


@pytest.mark.asyncio
async def test_retries_throttled_node_then_succeeds(caplog: pytest.LogCaptureFixture) -> None:
    """Test that 429/5xx responses are retried by default."""
    node = FakeNode([TransientRPCError("RPC HTTP 429"), TransientRPCError("RPC HTTP 503")])

    with caplog.at_level(logging.WARNING, logger="swaproute.core.retry"):
        result = await node.call("eth_call", [])

    assert result == "0x1"
    assert node.calls == ["eth_call"] * 3
    messages = [r.getMessage() for r in caplog.records]
    assert len(messages) == 2
    assert "FakeNode.call(eth_call) attempt 1/3" in messages[0]
    assert "RPC HTTP 429" in messages[0]


@pytest.mark.asyncio
async def test_retries_transport_errors() -> None:
    node = FakeNode([httpx.ConnectError("Connection refused")])

    assert await node.call("eth_blockNumber", []) == "0x1"
    assert len(node.calls) == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts() -> None:
    node = FakeNode([httpx.ReadTimeout("timed out")] * 5)

    with pytest.raises(httpx.ReadTimeout):
        await node.call("eth_call", [])

    assert len(node.calls) == 3


@pytest.mark.asyncio
async def test_non_transient_errors_are_not_retried() -> None:
    node = FakeNode([PriceSourceError("execution reverted")])

    with pytest.raises(PriceSourceError):
        await node.call("eth_call", [])

    assert len(node.calls) == 1
