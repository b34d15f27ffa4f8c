from __future__ import annotations

import math

import pytest

from swaproute.core.errors import NegativeCycleError
from swaproute.models.api import CandidateEdge, PriceQuote
from swaproute.models.graph import Edge, Graph, edge_weight
from swaproute.pipeline.graph import build_graph
from swaproute.pipeline.pathfinder import find_best_path, shortest_paths


def _graph(*edges: tuple[str, str, float, float]) -> Graph:
    """Graph from (source, target, rate, fee) tuples."""
    g = Graph()
    for source, target, rate, fee in edges:
        g.add_edge(Edge(source=source, target=target, weight=edge_weight(rate, fee), rate=rate, fee=fee))
    return g


def test_direct_edge_eth_to_usdc() -> None:
    graph, _ = build_graph(
        [CandidateEdge(from_token="ETH", to_token="USDC", fee=0.003)],
        {"ETH": PriceQuote.of("ETH", 2000.0), "USDC": PriceQuote.of("USDC", 1.0)},
    )

    result = find_best_path(graph, "ETH", "USDC", 1.0)

    assert result.path == ("ETH", "USDC")
    assert result.amount == pytest.approx(0.0004985)


def test_reverse_direction_without_edge_unreachable() -> None:
    graph = _graph(("ETH", "USDC", 0.0005, 0.003))

    result = find_best_path(graph, "USDC", "ETH", 1.0)

    assert result.path == ()
    assert result.amount == 0.0
    assert not result.reachable


def test_multi_hop_beats_expensive_direct_edge() -> None:
    graph = _graph(
        ("ETH", "DAI", 2000.0, 0.05),
        ("ETH", "USDC", 2000.0, 0.003),
        ("USDC", "DAI", 1.0, 0.001),
    )

    result = find_best_path(graph, "ETH", "DAI", 1.0)

    assert result.path == ("ETH", "USDC", "DAI")
    assert result.amount == pytest.approx(2000.0 * 0.997 * 0.999)
    assert result.hops == 2


def test_direct_edge_kept_when_cheaper() -> None:
    graph = _graph(
        ("ETH", "DAI", 2000.0, 0.001),
        ("ETH", "USDC", 2000.0, 0.003),
        ("USDC", "DAI", 1.0, 0.001),
    )

    result = find_best_path(graph, "ETH", "DAI", 2.0)

    assert result.path == ("ETH", "DAI")
    assert result.amount == pytest.approx(2.0 * 2000.0 * 0.999)


def test_output_scales_with_input_amount() -> None:
    graph = _graph(("ETH", "USDC", 2000.0, 0.003))

    one = find_best_path(graph, "ETH", "USDC", 1.0)
    ten = find_best_path(graph, "ETH", "USDC", 10.0)

    assert ten.amount == pytest.approx(10 * one.amount)


def test_unknown_tokens_are_unreachable() -> None:
    graph = _graph(("ETH", "USDC", 2000.0, 0.003))

    assert find_best_path(graph, "WBTC", "USDC", 1.0).path == ()
    assert find_best_path(graph, "ETH", "WBTC", 1.0).path == ()


def test_empty_graph_has_no_paths() -> None:
    result = find_best_path(Graph(), "ETH", "USDC", 1.0)
    assert result.path == ()
    assert result.amount == 0.0


def test_paths_start_at_source_and_end_at_target() -> None:
    graph = _graph(
        ("ETH", "USDC", 2000.0, 0.003),
        ("USDC", "DAI", 1.0, 0.001),
        ("ETH", "LINK", 2000.0 / 15.0, 0.003),
        ("LINK", "DAI", 15.0, 0.002),
        ("UNI", "DAI", 7.0, 0.002),
    )
    paths = shortest_paths(graph, "ETH")

    for target in graph.tokens:
        if target == "ETH":
            continue
        result = paths.result(target, 1.0)
        if result.reachable:
            assert result.path[0] == "ETH"
            assert result.path[-1] == target
            assert result.amount > 0
        else:
            assert result.amount == 0.0

    assert paths.result("UNI").path == ()


def test_distances_are_sum_of_weights() -> None:
    graph = _graph(("A", "B", 2.0, 0.0), ("B", "C", 3.0, 0.0))

    paths = shortest_paths(graph, "A")

    assert paths.distance["C"] == pytest.approx(-math.log(6.0))
    assert paths.predecessor["C"] == "B"
    assert paths.result("C").amount == pytest.approx(6.0)


def test_negative_cycle_is_rejected() -> None:
    # A -> B -> A multiplies to 1.21, a risk-free loop
    graph = _graph(("A", "B", 1.1, 0.0), ("B", "A", 1.1, 0.0), ("B", "C", 1.0, 0.0))

    with pytest.raises(NegativeCycleError) as exc_info:
        shortest_paths(graph, "A")

    assert exc_info.value.source == "A"
    assert "A" in exc_info.value.tokens or "B" in exc_info.value.tokens


def test_cycle_not_reachable_from_source_is_ignored() -> None:
    graph = _graph(
        ("X", "Y", 1.1, 0.0),
        ("Y", "X", 1.1, 0.0),
        ("A", "B", 2.0, 0.0),
    )

    result = find_best_path(graph, "A", "B", 1.0)

    assert result.path == ("A", "B")
    assert result.amount == pytest.approx(2.0)


def test_fee_dampened_round_trip_is_not_a_cycle() -> None:
    graph = _graph(("ETH", "USDC", 2000.0, 0.003), ("USDC", "ETH", 1 / 2000.0, 0.003))

    result = find_best_path(graph, "USDC", "ETH", 1.0)

    assert result.path == ("USDC", "ETH")
    assert result.amount == pytest.approx(0.997 / 2000.0)


@pytest.mark.parametrize("eth_price", [10.0, 0.1, 2000.0, 3.0])
def test_zero_fee_reciprocal_edges_are_not_a_cycle(eth_price: float) -> None:
    graph, _ = build_graph(
        [
            CandidateEdge(from_token="ETH", to_token="USDC", fee=0.0),
            CandidateEdge(from_token="USDC", to_token="ETH", fee=0.0),
        ],
        {"ETH": PriceQuote.of("ETH", eth_price), "USDC": PriceQuote.of("USDC", 1.0)},
    )

    for source, target, expected in [("ETH", "USDC", 1.0 / eth_price), ("USDC", "ETH", eth_price)]:
        paths = shortest_paths(graph, source)
        result = paths.result(target)
        assert result.path == (source, target)
        assert result.amount == pytest.approx(expected)
