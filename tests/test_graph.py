from __future__ import annotations

import math

import pytest

from swaproute.models.api import CandidateEdge, PriceQuote, Token
from swaproute.pipeline.graph import GraphBuilder, build_graph
from swaproute.sources.base import PriceSource
from swaproute.sources.static import StaticPriceSource


class ExplodingSource(PriceSource):
    """Source that breaks the no-raise contract for one symbol."""

    def __init__(self, prices: dict[str, float], broken: str):
        self.prices = prices
        self.broken = broken

    @property
    def name(self) -> str:
        return "exploding"

    async def get_price(self, token: Token) -> PriceQuote:
        if token.symbol == self.broken:
            raise RuntimeError("boom")
        return PriceQuote.of(token.symbol, self.prices[token.symbol])


def test_build_graph_single_priced_edge() -> None:
    """ETH=2000, USDC=1, fee 0.003: rate 0.0005 and weight -ln(0.0005 * 0.997)."""
    graph, stats = build_graph(
        [CandidateEdge(from_token="ETH", to_token="USDC", fee=0.003)],
        {"ETH": PriceQuote.of("ETH", 2000.0), "USDC": PriceQuote.of("USDC", 1.0)},
    )

    edge = graph.edge("ETH", "USDC")
    assert edge is not None
    assert edge.rate == pytest.approx(0.0005)
    assert edge.weight == pytest.approx(-math.log(0.0005 * 0.997))
    assert graph.edge("USDC", "ETH") is None
    assert stats.edges_built == 1
    assert stats.skipped == []


def test_build_graph_excludes_edges_with_missing_quote(candidates: list[CandidateEdge]) -> None:
    quotes = {
        "ETH": PriceQuote.of("ETH", 2000.0),
        "USDC": PriceQuote.unavailable("USDC"),
        "DAI": PriceQuote.of("DAI", 1.0),
        "LINK": PriceQuote.transient("LINK", "timeout"),
    }
    graph, stats = build_graph(candidates, quotes)

    assert [(e.source, e.target) for e in graph.edges()] == [("ETH", "DAI")]
    assert "USDC" not in graph
    assert "LINK" not in graph
    assert stats.quotes_ok == 2
    assert set(stats.skipped) == {"ETH->USDC", "USDC->DAI", "ETH->LINK", "LINK->DAI"}


def test_build_graph_without_any_quote_is_empty(candidates: list[CandidateEdge]) -> None:
    graph, stats = build_graph(candidates, {})
    assert graph.is_empty()
    assert graph.tokens == []
    assert stats.edges_built == 0


@pytest.mark.asyncio
async def test_builder_excludes_edges_of_unavailable_token(
    tokens: list[Token], candidates: list[CandidateEdge], prices: dict[str, float]
) -> None:
    """A failed USDC quote leaves no edge touching USDC."""
    del prices["USDC"]
    builder = GraphBuilder(StaticPriceSource(prices), tokens, candidates)

    graph = await builder.build()

    assert all("USDC" not in (e.source, e.target) for e in graph.edges())
    assert "USDC" not in graph.tokens
    assert graph.edge_count == 3


@pytest.mark.asyncio
async def test_builder_fetches_each_token_once_per_build(
    tokens: list[Token], candidates: list[CandidateEdge], prices: dict[str, float]
) -> None:
    source = StaticPriceSource(prices)
    builder = GraphBuilder(source, tokens, candidates)

    await builder.build()
    assert sorted(source.calls) == ["DAI", "ETH", "LINK", "USDC"]

    await builder.build()
    assert len(source.calls) == 8, "Quotes must not be cached across builds"


@pytest.mark.asyncio
async def test_builder_is_idempotent_for_identical_quotes(
    tokens: list[Token], candidates: list[CandidateEdge], prices: dict[str, float]
) -> None:
    builder = GraphBuilder(StaticPriceSource(prices), tokens, candidates)

    first = await builder.build()
    second = await builder.build()

    assert list(first.edges()) == list(second.edges())
    assert first.tokens == second.tokens


@pytest.mark.asyncio
async def test_builder_returns_empty_graph_when_every_quote_fails(
    tokens: list[Token], candidates: list[CandidateEdge]
) -> None:
    builder = GraphBuilder(StaticPriceSource({}), tokens, candidates)

    graph = await builder.build()

    assert graph.is_empty()
    assert builder.last_stats is not None
    assert builder.last_stats.quotes_ok == 0


@pytest.mark.asyncio
async def test_builder_survives_source_exception(
    tokens: list[Token], candidates: list[CandidateEdge], prices: dict[str, float]
) -> None:
    builder = GraphBuilder(ExplodingSource(prices, broken="LINK"), tokens, candidates)

    graph = await builder.build()

    assert "LINK" not in graph
    assert graph.edge("ETH", "USDC") is not None


@pytest.mark.asyncio
async def test_builder_skips_unknown_tokens(candidates: list[CandidateEdge], prices: dict[str, float]) -> None:
    builder = GraphBuilder(StaticPriceSource(prices), [Token(symbol="ETH"), Token(symbol="USDC")], candidates)

    graph = await builder.build()

    assert [(e.source, e.target) for e in graph.edges()] == [("ETH", "USDC")]
