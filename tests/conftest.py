"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from datetime import datetime, timezone
from pathlib import Path

import pytest

from poolsniper.config import (
    WSOL_MINT,
    AppConfig,
    EndpointsConfig,
    LiquidityPoolConfig,
    NotificationsConfig,
    RugCheckConfig,
    SellConfig,
    SwapConfig,
    TelegramConfig,
    TxConfig,
    WalletConfig,
)
from poolsniper.models import Holding, MarketInfo, RiskReport, TopHolder

from helpers import BASE_MINT, FAKE_PRIVATE_KEY, pool_init_transaction


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_endpoints() -> EndpointsConfig:
    return EndpointsConfig(
        rpc_http=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_wss="wss://rpc1.example.com",
        tx_detail="https://tx.example.com/v0/transactions",
        request_timeout=5,
    )


@pytest.fixture()
def sample_tx_config() -> TxConfig:
    return TxConfig(
        concurrent_transactions=2,
        initial_delay=0.0,
        max_retries=4,
        backoff_base=2.0,
        backoff_factor=1.5,
        backoff_cap=15.0,
        reconnect_delay=0.0,
    )


@pytest.fixture()
def sample_pool_config() -> LiquidityPoolConfig:
    return LiquidityPoolConfig()


@pytest.fixture()
def sample_swap_config() -> SwapConfig:
    return SwapConfig(
        not_tradable_retries=3,
        not_tradable_delay=0.0,
        confirm_poll_interval=0.0,
        confirm_timeout=10.0,
        detail_retries=2,
        detail_retry_delay=0.0,
    )


@pytest.fixture()
def sample_sell_config() -> SellConfig:
    return SellConfig(auto_sell=True, stop_loss_percent=50.0, take_profit_percent=20.0)


@pytest.fixture()
def sample_rug_config() -> RugCheckConfig:
    return RugCheckConfig(
        min_total_markets=1,
        min_total_market_liquidity=1000.0,
        block_symbols=("XXX",),
        block_names=("XXX",),
    )


@pytest.fixture()
def sample_app_config(
    sample_endpoints: EndpointsConfig,
    sample_tx_config: TxConfig,
    sample_pool_config: LiquidityPoolConfig,
    sample_swap_config: SwapConfig,
    sample_sell_config: SellConfig,
    sample_rug_config: RugCheckConfig,
) -> AppConfig:
    return AppConfig(
        endpoints=sample_endpoints,
        wallet=WalletConfig(private_key=FAKE_PRIVATE_KEY),
        liquidity_pool=sample_pool_config,
        tx=sample_tx_config,
        swap=sample_swap_config,
        sell=sample_sell_config,
        rug_check=sample_rug_config,
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_report() -> RiskReport:
    """A report that passes every rule under ``sample_rug_config``."""
    return RiskReport(
        mint=BASE_MINT,
        mint_authority=None,
        freeze_authority=None,
        is_initialized=True,
        mutable=False,
        name="Good Token",
        symbol="GOOD",
        creator="Creator111",
        top_holders=(
            TopHolder(address="LpVaultA", pct=80.0),
            TopHolder(address="Holder1", pct=5.0),
            TopHolder(address="Holder2", pct=3.5),
        ),
        markets=(MarketInfo(pubkey="Market1", liquidity_a="LpVaultA", liquidity_b="LpVaultB"),),
        total_lp_providers=3,
        total_market_liquidity=25_000.0,
        rugged=False,
        score=120.0,
        risks=(),
        detected_at=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def sample_holding() -> Holding:
    return Holding(
        mint=BASE_MINT,
        name="Good Token",
        entry_time=1_767_268_800_000,
        units=100.0,
        sol_spent=0.01,
        sol_fee_spent=0.0001,
        sol_spent_usd=100.0,
        sol_fee_usd=2.0,
        per_unit_usd=1.0,
        slot=300_000_000,
        program="RAYDIUM",
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent(f"""\
    endpoints:
      rpc_http: ["https://rpc.example.com"]
      rpc_wss: "wss://rpc.example.com"
      tx_detail: "https://tx.example.com/v0/transactions"
      request_timeout: 7
    wallet:
      private_key: "{FAKE_PRIVATE_KEY}"
    liquidity_pool:
      ignore_pump_fun: true
    tx:
      concurrent_transactions: 3
      max_retries: 5
    swap:
      amount: 5000000
      simulation_mode: false
      db_path: "holdings.db"
    sell:
      auto_sell: true
      take_profit_percent: 50
    rug_check:
      block_symbols: ["XXX", "SCAM"]
      max_score: 500
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: 999
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Sample provider payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_pool_transaction() -> list[dict]:
    return pool_init_transaction()


@pytest.fixture()
def sample_swap_transaction() -> list[dict]:
    return [
        {
            "signature": "buysig",
            "fee": 5000,
            "slot": 301_000_000,
            "timestamp": 1_767_268_800,
            "events": {
                "swap": {
                    "innerSwaps": [
                        {
                            "tokenInputs": [{"mint": WSOL_MINT, "tokenAmount": 0.01}],
                            "tokenOutputs": [{"mint": "Intermediate", "tokenAmount": 3.0}],
                            "programInfo": {"source": "RAYDIUM", "account": "x"},
                        },
                        {
                            "tokenInputs": [{"mint": "Intermediate", "tokenAmount": 3.0}],
                            "tokenOutputs": [{"mint": BASE_MINT, "tokenAmount": 1250.5}],
                            "programInfo": {"source": "ORCA"},
                        },
                    ]
                }
            },
        }
    ]


@pytest.fixture()
def sample_rugcheck_payload() -> dict:
    return {
        "mint": BASE_MINT,
        "creator": "Creator111",
        "token": {"mintAuthority": None, "freezeAuthority": None, "isInitialized": True},
        "tokenMeta": {"name": "Good Token", "symbol": "GOOD", "mutable": False},
        "topHolders": [
            {"address": "LpVaultA", "pct": 80.0, "insider": False},
            {"address": "Holder1", "pct": 5.0, "insider": False},
        ],
        "markets": [{"pubkey": "Market1", "liquidityA": "LpVaultA", "liquidityB": "LpVaultB"}],
        "totalLPProviders": 3,
        "totalMarketLiquidity": 25000.5,
        "rugged": False,
        "score": 120,
        "risks": [{"name": "Low Liquidity", "level": "warn"}],
        "detectedAt": "2026-01-01T12:00:00Z",
    }
