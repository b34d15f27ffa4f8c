"""Pytest configuration for tests."""

from pathlib import Path

import pytest

from swaproute.core.storage import RouteStore
from swaproute.models.api import CandidateEdge, Token


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that make real RPC calls",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )


@pytest.fixture
def tokens() -> list[Token]:
    return [Token(symbol=s) for s in ("ETH", "USDC", "DAI", "LINK")]


@pytest.fixture
def candidates() -> list[CandidateEdge]:
    return [
        CandidateEdge(from_token="ETH", to_token="USDC", fee=0.003),
        CandidateEdge(from_token="USDC", to_token="DAI", fee=0.001),
        CandidateEdge(from_token="ETH", to_token="DAI", fee=0.004),
        CandidateEdge(from_token="ETH", to_token="LINK", fee=0.003),
        CandidateEdge(from_token="LINK", to_token="DAI", fee=0.002),
    ]


@pytest.fixture
def prices() -> dict[str, float]:
    return {"ETH": 2000.0, "USDC": 1.0, "DAI": 1.0, "LINK": 15.0}


@pytest.fixture
def store(tmp_path: Path) -> RouteStore:
    return RouteStore(tmp_path / "swap_routes.json")
