from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence

from swaproute.models.api import CandidateEdge, PriceQuote, Token
from swaproute.models.graph import Edge, Graph, edge_weight
from swaproute.models.pipeline import GraphStats
from swaproute.sources.base import PriceSource
from swaproute.utils.logging import get_logger

logger = get_logger(__name__)


def build_graph(candidates: Sequence[CandidateEdge], quotes: Mapping[str, PriceQuote]) -> tuple[Graph, GraphStats]:
    """Turn candidate edges and fetched quotes into a weighted graph.

    An edge is kept only when both quotes are OK and the rate is strictly
    positive. Edges keep the order of ``candidates``.
    """
    graph = Graph()
    stats = GraphStats(
        quotes_requested=len(quotes),
        quotes_ok=sum(1 for q in quotes.values() if q.ok),
        edges_considered=len(candidates),
    )

    for candidate in candidates:
        label = f"{candidate.from_token}->{candidate.to_token}"
        price_from = quotes.get(candidate.from_token)
        price_to = quotes.get(candidate.to_token)

        if price_from is None or price_to is None or not price_from.ok or not price_to.ok:
            logger.debug(f"Skipping {label}: missing quote")
            stats.skipped.append(label)
            continue

        assert price_from.price is not None and price_to.price is not None
        rate = price_to.price / price_from.price
        if not rate > 0:
            logger.debug(f"Skipping {label}: non-positive rate {rate}")
            stats.skipped.append(label)
            continue

        graph.add_edge(
            Edge(
                source=candidate.from_token,
                target=candidate.to_token,
                weight=edge_weight(rate, candidate.fee),
                rate=rate,
                fee=candidate.fee,
            )
        )

    stats.edges_built = graph.edge_count
    return graph, stats


class GraphBuilder:
    """Fetches fresh quotes for every token in the candidate list and builds the rate graph."""

    def __init__(
        self,
        source: PriceSource,
        tokens: Sequence[Token],
        candidates: Sequence[CandidateEdge],
        max_concurrency: int = 8,
    ):
        self.source = source
        self.tokens = {t.symbol: t for t in tokens}
        self.candidates = list(candidates)
        self.max_concurrency = max_concurrency
        self.last_stats: GraphStats | None = None

    def _required_tokens(self) -> list[Token]:
        symbols: list[str] = []
        for c in self.candidates:
            for symbol in (c.from_token, c.to_token):
                if symbol not in symbols:
                    symbols.append(symbol)

        required: list[Token] = []
        for symbol in symbols:
            token = self.tokens.get(symbol)
            if token is None:
                logger.warning(f"Candidate edge references unknown token {symbol}")
                continue
            required.append(token)
        return required

    async def fetch_quotes(self) -> dict[str, PriceQuote]:
        tokens = self._required_tokens()
        sem = asyncio.Semaphore(self.max_concurrency)

        async def fetch_one(token: Token) -> PriceQuote:
            async with sem:
                try:
                    return await self.source.get_price(token)
                except Exception as e:
                    logger.error(f"{self.source.name} raised for {token.symbol}: {e}")
                    return PriceQuote.transient(token.symbol, str(e))

        results = await asyncio.gather(*[fetch_one(t) for t in tokens])
        return {q.symbol: q for q in results}

    async def build(self) -> Graph:
        quotes = await self.fetch_quotes()

        failed = [q.symbol for q in quotes.values() if not q.ok]
        if failed:
            logger.warning(f"No price for {', '.join(failed)}; dependent edges excluded")

        graph, stats = build_graph(self.candidates, quotes)
        self.last_stats = stats

        if quotes and stats.quotes_ok == 0:
            logger.warning(f"Every quote from {self.source.name} failed; graph is empty")
        else:
            logger.info(
                f"Built graph: {stats.edges_built}/{stats.edges_considered} edges, "
                f"{stats.quotes_ok}/{stats.quotes_requested} quotes"
            )
        return graph
