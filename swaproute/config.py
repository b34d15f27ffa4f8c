from typing import Tuple

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, TomlConfigSettingsSource

from swaproute.models.api import CandidateEdge, Token


class DefaultSettings(BaseModel):
    http_timeout: int = 10
    max_concurrency: int = 8
    data_dir: str = "data"
    routes_file: str = "swap_routes.json"
    heartbeat_file: str = "output.log"


DEFAULT_TOKENS: list[Token] = [
    Token(symbol="ETH", decimals=8, feed="0x5f4eC3Df9cbd43714FE2740f5E3616155c5b8419"),
    Token(symbol="USDC", decimals=8, feed="0x8fFfFfd4AfB6115b954Bd326cbe7B4BA576818f6"),
    Token(symbol="DAI", decimals=8, feed="0xAed0c38402a5d19df6E4c03F4E2DceD6e29c1ee9"),
    Token(symbol="LINK", decimals=8, feed="0x2c1d072e956AFFC0D435Cb7AC38EF18d24d9127c"),
    Token(symbol="WBTC", decimals=8, feed="0xFD858c8bC5ac5e10f01018bC78471bb0DC392247"),
    Token(symbol="UNI", decimals=8, feed="0x553303d460EE0afB37EdFf9bE42922D8FF63220e"),
]

DEFAULT_CANDIDATE_EDGES: list[CandidateEdge] = [
    CandidateEdge(from_token="ETH", to_token="USDC", fee=0.003),
    CandidateEdge(from_token="USDC", to_token="DAI", fee=0.001),
    CandidateEdge(from_token="ETH", to_token="DAI", fee=0.004),
    CandidateEdge(from_token="ETH", to_token="LINK", fee=0.003),
    CandidateEdge(from_token="LINK", to_token="DAI", fee=0.002),
    CandidateEdge(from_token="ETH", to_token="WBTC", fee=0.002),
    CandidateEdge(from_token="WBTC", to_token="DAI", fee=0.003),
    CandidateEdge(from_token="UNI", to_token="DAI", fee=0.002),
    CandidateEdge(from_token="ETH", to_token="UNI", fee=0.003),
]


class Settings(BaseSettings):
    default: DefaultSettings = DefaultSettings()

    rpc_url: str | None = None
    interval_seconds: float = 60.0
    heartbeat_seconds: float = 5.0
    heartbeat_stale_seconds: float = 10.0
    output_precision: int = 6

    tokens: list[Token] = list(DEFAULT_TOKENS)
    candidate_edges: list[CandidateEdge] = list(DEFAULT_CANDIDATE_EDGES)

    model_config = SettingsConfigDict(
        toml_file="swaproute.toml",
        env_prefix="SWAPROUTE_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        _ = file_secret_settings

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @model_validator(mode="after")
    def _check_candidate_edges(self) -> "Settings":
        known = {t.symbol for t in self.tokens}
        for edge in self.candidate_edges:
            missing = {edge.from_token, edge.to_token} - known
            if missing:
                raise ValueError(f"Candidate edge {edge.from_token}->{edge.to_token} uses unknown tokens: {missing}")
        return self

    @property
    def symbols(self) -> list[str]:
        return [t.symbol for t in self.tokens]

    def token(self, symbol: str) -> Token:
        for t in self.tokens:
            if t.symbol == symbol.upper():
                return t
        raise KeyError(symbol)


settings = Settings()
