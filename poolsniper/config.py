"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

RAYDIUM_AMM_PROGRAM_ID = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"
WSOL_MINT = "So11111111111111111111111111111111111111112"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EndpointsConfig:
    rpc_http: tuple[str, ...] = ()
    rpc_wss: str = ""
    tx_detail: str = ""
    rug_report: str = "https://api.rugcheck.xyz/v1/tokens"
    quote: str = "https://quote-api.jup.ag/v6/quote"
    swap: str = "https://quote-api.jup.ag/v6/swap"
    price: str = "https://api.jup.ag/price/v2"
    secondary_price: str = "https://api.dexscreener.com/latest/dex/tokens"
    request_timeout: int = 10


@dataclass(frozen=True)
class WalletConfig:
    private_key: str = ""


@dataclass(frozen=True)
class LiquidityPoolConfig:
    program_id: str = RAYDIUM_AMM_PROGRAM_ID
    quote_mint: str = WSOL_MINT
    init_marker: str = "initialize2"
    ignore_pump_fun: bool = False


@dataclass(frozen=True)
class TxConfig:
    concurrent_transactions: int = 1
    initial_delay: float = 3.0
    max_retries: int = 8
    backoff_base: float = 2.0
    backoff_factor: float = 1.5
    backoff_cap: float = 15.0
    reconnect_delay: float = 5.0


@dataclass(frozen=True)
class SwapConfig:
    amount: int = 10_000_000
    slippage_bps: int = 200
    dynamic_slippage_max_bps: int = 300
    prio_fee_max_lamports: int = 1_000_000
    prio_level: str = "veryHigh"
    not_tradable_retries: int = 5
    not_tradable_delay: float = 2.0
    confirm_poll_interval: float = 1.0
    confirm_timeout: float = 60.0
    detail_retries: int = 3
    detail_retry_delay: float = 2.0
    db_path: str = "holdings.db"
    simulation_mode: bool = False
    verbose_log: bool = False


@dataclass(frozen=True)
class SellConfig:
    prio_fee_max_lamports: int = 1_000_000
    prio_level: str = "veryHigh"
    slippage_bps: int = 200
    auto_sell: bool = False
    stop_loss_percent: float = 100.0
    take_profit_percent: float = 20.0
    check_interval: float = 5.0
    remove_worthless_below_usd: float = 0.0
    track_public_wallet: str = ""


@dataclass(frozen=True)
class RugCheckConfig:
    verbose_log: bool = False
    allow_mint_authority: bool = False
    allow_not_initialized: bool = False
    allow_freeze_authority: bool = False
    allow_mutable: bool = False
    allow_insider_topholders: bool = False
    allow_rugged: bool = False
    max_allowed_pct_topholders: float = 30.0
    exclude_lp_from_topholders: bool = True
    min_total_lp_providers: int = 0
    min_total_markets: int = 1
    min_total_market_liquidity: float = 1000.0
    block_symbols: tuple[str, ...] = ()
    block_names: tuple[str, ...] = ()
    max_score: float = 0.0
    legacy_not_allowed: tuple[str, ...] = (
        "Freeze Authority still enabled",
        "Copycat token",
    )
    max_token_age_minutes: int = 0
    block_returning_token_names: bool = False
    block_returning_token_creators: bool = False


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)


@dataclass(frozen=True)
class AppConfig:
    endpoints: EndpointsConfig = field(default_factory=EndpointsConfig)
    wallet: WalletConfig = field(default_factory=WalletConfig)
    liquidity_pool: LiquidityPoolConfig = field(default_factory=LiquidityPoolConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    swap: SwapConfig = field(default_factory=SwapConfig)
    sell: SellConfig = field(default_factory=SellConfig)
    rug_check: RugCheckConfig = field(default_factory=RugCheckConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _as_bool(value: Any) -> bool:
    # Interpolated env values arrive as strings.
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_endpoints(raw: dict[str, Any]) -> EndpointsConfig:
    rpc_http = raw.get("rpc_http", [])
    if isinstance(rpc_http, str):
        rpc_http = [rpc_http]
    defaults = EndpointsConfig()
    return EndpointsConfig(
        rpc_http=tuple(url for url in rpc_http if url),
        rpc_wss=raw.get("rpc_wss", ""),
        tx_detail=raw.get("tx_detail", ""),
        rug_report=raw.get("rug_report", defaults.rug_report),
        quote=raw.get("quote", defaults.quote),
        swap=raw.get("swap", defaults.swap),
        price=raw.get("price", defaults.price),
        secondary_price=raw.get("secondary_price", defaults.secondary_price),
        request_timeout=int(raw.get("request_timeout", defaults.request_timeout)),
    )


def _build_wallet(raw: dict[str, Any]) -> WalletConfig:
    return WalletConfig(private_key=str(raw.get("private_key", "")).strip())


def _build_liquidity_pool(raw: dict[str, Any]) -> LiquidityPoolConfig:
    return LiquidityPoolConfig(
        program_id=raw.get("program_id", RAYDIUM_AMM_PROGRAM_ID),
        quote_mint=raw.get("quote_mint", WSOL_MINT),
        init_marker=raw.get("init_marker", "initialize2"),
        ignore_pump_fun=_as_bool(raw.get("ignore_pump_fun", False)),
    )


def _build_tx(raw: dict[str, Any]) -> TxConfig:
    return TxConfig(
        concurrent_transactions=int(raw.get("concurrent_transactions", 1)),
        initial_delay=float(raw.get("initial_delay", 3.0)),
        max_retries=int(raw.get("max_retries", 8)),
        backoff_base=float(raw.get("backoff_base", 2.0)),
        backoff_factor=float(raw.get("backoff_factor", 1.5)),
        backoff_cap=float(raw.get("backoff_cap", 15.0)),
        reconnect_delay=float(raw.get("reconnect_delay", 5.0)),
    )


def _build_swap(raw: dict[str, Any]) -> SwapConfig:
    return SwapConfig(
        amount=int(raw.get("amount", 10_000_000)),
        slippage_bps=int(raw.get("slippage_bps", 200)),
        dynamic_slippage_max_bps=int(raw.get("dynamic_slippage_max_bps", 300)),
        prio_fee_max_lamports=int(raw.get("prio_fee_max_lamports", 1_000_000)),
        prio_level=raw.get("prio_level", "veryHigh"),
        not_tradable_retries=int(raw.get("not_tradable_retries", 5)),
        not_tradable_delay=float(raw.get("not_tradable_delay", 2.0)),
        confirm_poll_interval=float(raw.get("confirm_poll_interval", 1.0)),
        confirm_timeout=float(raw.get("confirm_timeout", 60.0)),
        detail_retries=int(raw.get("detail_retries", 3)),
        detail_retry_delay=float(raw.get("detail_retry_delay", 2.0)),
        db_path=raw.get("db_path", "holdings.db"),
        simulation_mode=_as_bool(raw.get("simulation_mode", False)),
        verbose_log=_as_bool(raw.get("verbose_log", False)),
    )


def _build_sell(raw: dict[str, Any]) -> SellConfig:
    return SellConfig(
        prio_fee_max_lamports=int(raw.get("prio_fee_max_lamports", 1_000_000)),
        prio_level=raw.get("prio_level", "veryHigh"),
        slippage_bps=int(raw.get("slippage_bps", 200)),
        auto_sell=_as_bool(raw.get("auto_sell", False)),
        stop_loss_percent=float(raw.get("stop_loss_percent", 100.0)),
        take_profit_percent=float(raw.get("take_profit_percent", 20.0)),
        check_interval=float(raw.get("check_interval", 5.0)),
        remove_worthless_below_usd=float(raw.get("remove_worthless_below_usd", 0.0)),
        track_public_wallet=raw.get("track_public_wallet", ""),
    )


def _build_rug_check(raw: dict[str, Any]) -> RugCheckConfig:
    defaults = RugCheckConfig()
    return RugCheckConfig(
        verbose_log=_as_bool(raw.get("verbose_log", False)),
        allow_mint_authority=_as_bool(raw.get("allow_mint_authority", False)),
        allow_not_initialized=_as_bool(raw.get("allow_not_initialized", False)),
        allow_freeze_authority=_as_bool(raw.get("allow_freeze_authority", False)),
        allow_mutable=_as_bool(raw.get("allow_mutable", False)),
        allow_insider_topholders=_as_bool(raw.get("allow_insider_topholders", False)),
        allow_rugged=_as_bool(raw.get("allow_rugged", False)),
        max_allowed_pct_topholders=float(raw.get("max_allowed_pct_topholders", 30.0)),
        exclude_lp_from_topholders=_as_bool(raw.get("exclude_lp_from_topholders", True)),
        min_total_lp_providers=int(raw.get("min_total_lp_providers", 0)),
        min_total_markets=int(raw.get("min_total_markets", 1)),
        min_total_market_liquidity=float(raw.get("min_total_market_liquidity", 1000.0)),
        block_symbols=tuple(raw.get("block_symbols", [])),
        block_names=tuple(raw.get("block_names", [])),
        max_score=float(raw.get("max_score", 0.0)),
        legacy_not_allowed=tuple(raw.get("legacy_not_allowed", defaults.legacy_not_allowed)),
        max_token_age_minutes=int(raw.get("max_token_age_minutes", 0)),
        block_returning_token_names=_as_bool(raw.get("block_returning_token_names", False)),
        block_returning_token_creators=_as_bool(
            raw.get("block_returning_token_creators", False)
        ),
    )


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {})
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=_as_bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        endpoints=_build_endpoints(raw.get("endpoints", {})),
        wallet=_build_wallet(raw.get("wallet", {})),
        liquidity_pool=_build_liquidity_pool(raw.get("liquidity_pool", {})),
        tx=_build_tx(raw.get("tx", {})),
        swap=_build_swap(raw.get("swap", {})),
        sell=_build_sell(raw.get("sell", {})),
        rug_check=_build_rug_check(raw.get("rug_check", {})),
        notifications=_build_notifications(raw.get("notifications", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _check_scheme(name: str, url: str, scheme: str) -> None:
    if urlparse(url).scheme != scheme:
        raise ConfigError(f"Endpoint '{name}' must start with {scheme}://")


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    endpoints = cfg.endpoints
    if not endpoints.rpc_http:
        raise ConfigError("At least one RPC HTTP endpoint must be configured")
    for url in endpoints.rpc_http:
        _check_scheme("rpc_http", url, "https")
    if not endpoints.rpc_wss:
        raise ConfigError("Endpoint 'rpc_wss' is not set")
    _check_scheme("rpc_wss", endpoints.rpc_wss, "wss")
    for name in ("tx_detail", "rug_report", "quote", "swap", "price"):
        url = getattr(endpoints, name)
        if not url:
            raise ConfigError(f"Endpoint '{name}' is not set")
        _check_scheme(name, url, "https")

    key = cfg.wallet.private_key
    if not key and not cfg.swap.simulation_mode:
        raise ConfigError("Wallet private key is required unless simulation_mode is on")
    if key and len(key) not in (87, 88):
        raise ConfigError(
            f"Wallet private key must be 87 or 88 characters long (got {len(key)})"
        )

    if cfg.tx.concurrent_transactions < 1:
        raise ConfigError("tx.concurrent_transactions must be at least 1")
    if cfg.tx.max_retries < 1:
        raise ConfigError("tx.max_retries must be at least 1")
    if cfg.tx.backoff_factor < 1:
        raise ConfigError("tx.backoff_factor must be at least 1")
    if cfg.tx.backoff_base < 0 or cfg.tx.backoff_cap < 0:
        raise ConfigError("tx.backoff_base and tx.backoff_cap must not be negative")
