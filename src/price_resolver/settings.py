"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from web3 import Web3

from .constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_PIVOT_SYMBOLS,
    DEFAULT_TWAP_WINDOW_SECONDS,
    ETH_ASSET,
    MAX_DEPTH_LIMIT,
    NetworkAssets,
)
from .domain import (
    RateKind,
    UnwrapDirection,
    Venue,
    VenueFamily,
    WrappedAssetLink,
)

load_dotenv()

DEFAULT_FAMILY_PRIORITY: list[VenueFamily] = [
    VenueFamily.STABLE_SWAP,
    VenueFamily.CONCENTRATED_LIQUIDITY,
    VenueFamily.CONSTANT_PRODUCT,
    VenueFamily.SYNTHETIC,
]

TWO_ASSET_FAMILIES = frozenset(
    {VenueFamily.CONSTANT_PRODUCT, VenueFamily.CONCENTRATED_LIQUIDITY}
)


class Network(str, Enum):
    MAINNET = "mainnet"
    SEPOLIA = "sepolia"
    BASE = "base"


def canonical_address(value: str) -> str:
    """Checksum an address regardless of the case it was written in.

    Raises:
        ValueError: If ``value`` is not a 20-byte hex address.
    """
    if not isinstance(value, str):
        raise ValueError(f"Address must be a string, got {type(value).__name__}")
    candidate = value.strip().lower()
    if not Web3.is_address(candidate):
        raise ValueError(f"Invalid address: {value!r}")
    return Web3.to_checksum_address(candidate)


class VenueSettings(BaseModel):
    """One liquidity venue as written in the config file."""

    family: VenueFamily
    address: str
    assets: list[str] = Field(min_length=2)
    currency_keys: list[str] | None = None
    twap_window: int | None = Field(default=None, gt=0)
    name: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return canonical_address(v)

    @field_validator("assets")
    @classmethod
    def checksum_assets(cls, v: list[str]) -> list[str]:
        assets = [canonical_address(asset) for asset in v]
        if len(set(assets)) != len(assets):
            raise ValueError(f"Venue assets must be unique: {assets}")
        return assets

    @model_validator(mode="after")
    def validate_family_shape(self) -> "VenueSettings":
        if self.family in TWO_ASSET_FAMILIES and len(self.assets) != 2:
            raise ValueError(
                f"{self.family.value} venue {self.address} must list exactly 2 assets"
            )
        if self.family == VenueFamily.SYNTHETIC:
            if self.currency_keys is None or len(self.currency_keys) != len(
                self.assets
            ):
                raise ValueError(
                    f"Synthetic venue {self.address} needs one currency key per asset"
                )
        if (
            self.family == VenueFamily.CONCENTRATED_LIQUIDITY
            and self.twap_window is None
        ):
            self.twap_window = DEFAULT_TWAP_WINDOW_SECONDS
        return self

    def to_venue(self) -> Venue:
        return Venue(
            family=self.family,
            address=self.address,
            assets=tuple(self.assets),
            currency_keys=tuple(self.currency_keys) if self.currency_keys else None,
            twap_window=self.twap_window,
            name=self.name,
        )


class WrappedAssetSettings(BaseModel):
    """One wrapped-asset link as written in the config file."""

    wrapped: str
    underlying: str
    rate_kind: RateKind
    direction: UnwrapDirection = UnwrapDirection.WRAPPED_TO_UNDERLYING
    rate_source: str | None = None
    rate_function: str | None = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("wrapped", "underlying")
    @classmethod
    def checksum_assets(cls, v: str) -> str:
        return canonical_address(v)

    @field_validator("rate_source")
    @classmethod
    def checksum_rate_source(cls, v: str | None) -> str | None:
        return None if v is None else canonical_address(v)

    @model_validator(mode="after")
    def validate_virtual_price_source(self) -> "WrappedAssetSettings":
        if self.rate_kind == RateKind.POOL_VIRTUAL_PRICE and self.rate_source is None:
            raise ValueError(
                f"pool_virtual_price link for {self.wrapped} needs rate_source (the pool)"
            )
        return self

    def to_link(self) -> WrappedAssetLink:
        return WrappedAssetLink(
            wrapped=self.wrapped,
            underlying=self.underlying,
            rate_kind=self.rate_kind,
            direction=self.direction,
            rate_source=self.rate_source,
            rate_function=self.rate_function,
        )


class ResolverSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with PRICE_RESOLVER_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- chain access ---
    rpc_url: str | None = None
    network: Network = Network.MAINNET
    block_number: int | None = None
    rpc_timeout: float = Field(default=15.0, gt=0)
    connect_retries: int = Field(default=3, ge=0)

    # --- resolution ---
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=MAX_DEPTH_LIMIT)
    pivots: list[str] | None = None
    pivot_blacklist: list[str] = Field(default_factory=list)
    family_priority: list[VenueFamily] = Field(
        default_factory=lambda: list(DEFAULT_FAMILY_PRIORITY)
    )
    venues: list[VenueSettings] = Field(default_factory=list)
    wrapped_assets: list[WrappedAssetSettings] = Field(default_factory=list)
    asset_aliases: dict[str, str] = Field(default_factory=dict)
    asset_decimals: dict[str, int] = Field(default_factory=dict)

    # --- batch queries ---
    batch_max_concurrency: int = Field(default=8, ge=1)
    pair_timeout_seconds: float | None = Field(default=None, gt=0)

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PRICE_RESOLVER_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("pivots")
    @classmethod
    def checksum_pivots(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else [canonical_address(p) for p in v]

    @field_validator("pivot_blacklist")
    @classmethod
    def checksum_blacklist(cls, v: list[str]) -> list[str]:
        return [canonical_address(p) for p in v]

    @field_validator("asset_aliases")
    @classmethod
    def checksum_aliases(cls, v: dict[str, str]) -> dict[str, str]:
        return {canonical_address(k): canonical_address(t) for k, t in v.items()}

    @field_validator("asset_decimals")
    @classmethod
    def checksum_decimals(cls, v: dict[str, int]) -> dict[str, int]:
        result: dict[str, int] = {}
        for asset, decimals in v.items():
            if not 0 <= decimals <= 77:
                raise ValueError(f"Decimals for {asset} out of range: {decimals}")
            result[canonical_address(asset)] = decimals
        return result

    @model_validator(mode="after")
    def validate_family_priority(self) -> "ResolverSettings":
        """Validate that each venue family appears at most once."""
        if len(set(self.family_priority)) != len(self.family_priority):
            raise ValueError(
                f"family_priority contains duplicates: {[f.value for f in self.family_priority]}"
            )
        configured = {venue.family for venue in self.venues}
        missing = configured - set(self.family_priority)
        if missing:
            raise ValueError(
                f"Venues configured for families absent from family_priority: "
                f"{sorted(f.value for f in missing)}"
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("PRICE_RESOLVER_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    # Try default locations
                    local_config = Path("price-resolver.toml")
                    user_config = (
                        Path.home() / ".config" / "price-resolver" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [price_resolver]
                body = data.get("price_resolver", data)
                if not isinstance(body, dict):
                    return {}
                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with credentials in the RPC URL redacted."""
        data = self.model_dump(mode="json")
        if self.rpc_url:
            data["rpc_url"] = redact_url(self.rpc_url)
        return data

    @property
    def rpc_url_required(self) -> str:
        """Get rpc_url, raising ValueError if not set."""
        if self.rpc_url is None:
            raise ValueError("rpc_url must be configured")
        return self.rpc_url

    @property
    def assets(self) -> NetworkAssets:
        """Get the well-known assets for the configured network."""
        from .constants import BASE_ASSETS, ETH_MAINNET_ASSETS, SEPOLIA_ASSETS

        network_assets_map = {
            Network.MAINNET: ETH_MAINNET_ASSETS,
            Network.SEPOLIA: SEPOLIA_ASSETS,
            Network.BASE: BASE_ASSETS,
        }

        if self.network not in network_assets_map:
            raise ValueError(f"Unknown network: {self.network}")

        return network_assets_map[self.network]

    @property
    def pivot_assets(self) -> list[str]:
        """Configured pivots, or the network's default reserve assets."""
        if self.pivots is not None:
            return list(self.pivots)
        assets = self.assets
        return [
            canonical_address(address)
            for symbol in DEFAULT_PIVOT_SYMBOLS
            if (address := assets.get(symbol)) is not None
        ]

    @property
    def alias_map(self) -> dict[str, str]:
        """Asset aliases; native ETH resolves to WETH unless overridden."""
        aliases: dict[str, str] = {}
        weth = self.assets.get("WETH")
        if weth is not None:
            aliases[canonical_address(ETH_ASSET)] = canonical_address(weth)
        aliases.update(self.asset_aliases)
        return aliases

    def venue_list(self) -> list[Venue]:
        return [venue.to_venue() for venue in self.venues]

    def link_list(self) -> list[WrappedAssetLink]:
        return [link.to_link() for link in self.wrapped_assets]


def redact_url(url: str) -> str:
    """Hide userinfo and path/query components that commonly carry API keys."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return "***redacted***"
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    redacted_path = "/***" if parts.path not in ("", "/") else parts.path
    return urlunsplit((parts.scheme, host, redacted_path, "", ""))
