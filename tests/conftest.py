"""Pytest configuration and shared fixtures for the genesis builder tests.

The ``snapshot_files`` fixture describes a small legacy snapshot covering
every branch of the migration: dead, dying (auto-claimed or not) and active
validators, system accounts, auto-claimed reward pots, zero balances,
dropped nominators and zero-weight miners.
"""

import json
from collections.abc import Callable
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from typing import Any

from genesis_builder.helpers.constants import (
    LEGACY_COUNCIL_ACCOUNT,
    LEGACY_LBTC_ACCOUNT,
)
from tests.snapshot_data import (
    ACTIVE,
    ACTIVE_POT,
    ACTIVE_WEIGHT,
    ALICE,
    BOB,
    CAROL,
    DEAD,
    DEAD_POT,
    HEIGHT,
    MINER_1,
    MINER_2,
    MINER_LBTC,
    MINER_ZERO,
    MIXED,
    MIXED_POT,
    NO_BALANCE,
    NO_BALANCE_POT,
    NOMINATOR_1,
    NOMINATOR_2,
    NOMINATOR_3,
    SELF_BONDED,
    SELF_BONDED_POT,
    UNBACKED,
    UNBACKED_POT,
    UNWEIGHED,
    UNWEIGHED_POT,
    btc,
    intention,
    pcx,
)


@pytest.fixture
def accounts() -> list[dict[str, Any]]:
    """Contents of assets.json."""
    return [
        {"account": ALICE, "assets": [pcx(Free=5, ReservedStaking=0), btc(Free=0)]},
        {"account": BOB, "assets": [pcx(Free=100, ReservedStaking=50), btc(Free=7)]},
        {"account": CAROL, "assets": [pcx(Free=0)]},
        {"account": LEGACY_COUNCIL_ACCOUNT, "assets": [pcx(Free=1000), btc(Free=3)]},
        {"account": LEGACY_LBTC_ACCOUNT, "assets": [pcx(Free=150, ReservedStaking=50)]},
        {"account": SELF_BONDED, "assets": [pcx(Free=10)]},
        {"account": SELF_BONDED_POT, "assets": [pcx(Free=50)]},
        {"account": ACTIVE, "assets": [pcx(Free=500)]},
    ]


@pytest.fixture
def intentions() -> list[dict[str, Any]]:
    """Contents of intentions.json."""
    return [
        intention(DEAD, DEAD_POT, jackpot=0, self_vote=0, total_nomination=0, name="dead"),
        intention(
            SELF_BONDED,
            SELF_BONDED_POT,
            jackpot=50,
            self_vote=100,
            total_nomination=100,
            name="self-bonded",
        ),
        intention(MIXED, MIXED_POT, jackpot=70, self_vote=10, total_nomination=100, name="mixed"),
        intention(UNBACKED, UNBACKED_POT, jackpot=5, self_vote=0, total_nomination=0, name="unbacked"),
        intention(
            ACTIVE,
            ACTIVE_POT,
            jackpot=200_000_000,
            self_vote=1000,
            total_nomination=5000,
            name="active",
        ),
        intention(
            UNWEIGHED,
            UNWEIGHED_POT,
            jackpot=300_000_000,
            self_vote=0,
            total_nomination=42,
            name="unweighed",
        ),
        intention(
            NO_BALANCE,
            NO_BALANCE_POT,
            jackpot=30,
            self_vote=10,
            total_nomination=10,
            name="no-balance",
        ),
    ]


@pytest.fixture
def validator_weights() -> list[dict[str, Any]]:
    """Contents of vote-weight-nodes.json (no record for UNWEIGHED)."""
    return [
        {"account": ACTIVE, "nomination": 1000, "weight": ACTIVE_WEIGHT},
        {"account": DEAD, "nomination": 0, "weight": "0"},
    ]


@pytest.fixture
def nominators() -> list[dict[str, Any]]:
    """Contents of vote-weight-accounts.json."""
    return [
        {
            "account": NOMINATOR_1,
            "nodes": [
                {
                    "account": ACTIVE,
                    "nomination": 1000,
                    "weight": "500",
                    "revocations": [
                        {"blockNumber": 1, "value": 10},
                        {"blockNumber": 2, "value": 5},
                    ],
                },
                {
                    "account": MIXED,
                    "nomination": 0,
                    "weight": "0",
                    "revocations": [{"blockNumber": 3, "value": 7}],
                },
            ],
        },
        {
            "account": NOMINATOR_2,
            "nodes": [{"account": MIXED, "nomination": 0, "weight": "0", "revocations": []}],
        },
        {
            "account": NOMINATOR_3,
            "nodes": [
                {
                    "account": ACTIVE,
                    "nomination": 0,
                    "weight": "42",
                    "revocations": [{"blockNumber": 4, "value": 3}],
                }
            ],
        },
    ]


@pytest.fixture
def miners() -> list[dict[str, Any]]:
    """Contents of deposit-weight-accounts.json."""
    return [
        {"account": MINER_ZERO, "xbtc": {"weight": "0", "balance": 0}},
        {"account": MINER_1, "xbtc": {"weight": "10", "balance": 1}},
        {"account": MINER_2, "xbtc": {"weight": "20", "balance": 2}},
        {"account": MINER_LBTC, "lbtc": {"weight": "5"}},
    ]


@pytest.fixture
def mining_assets() -> dict[str, Any]:
    """Contents of deposit-weight-nodes.json, the xbtc pool weight is stale."""
    return {
        "xbtc": {"weight": "999", "balance": 3, "lastTotalDepositWeightUpdate": 7},
        "lbtc": {"weight": "5"},
    }


@pytest.fixture
def assets_total() -> list[dict[str, Any]]:
    """Contents of assets-total.json, consistent with ``accounts``."""
    return [
        {"name": "PCX", "details": {"Free": 1815, "ReservedStaking": 100}},
        {"name": "BTC", "details": {"Free": 10}},
        {"name": "L-BTC", "details": {}},
        {"name": "SDOT", "details": {}},
    ]


@pytest.fixture
def snapshot_files(
    accounts: list[dict[str, Any]],
    intentions: list[dict[str, Any]],
    validator_weights: list[dict[str, Any]],
    nominators: list[dict[str, Any]],
    miners: list[dict[str, Any]],
    mining_assets: dict[str, Any],
    assets_total: list[dict[str, Any]],
) -> dict[str, Any]:
    """Every snapshot file, keyed by file name."""
    return {
        "assets.json": accounts,
        "assets-total.json": assets_total,
        "intentions.json": intentions,
        "vote-weight-nodes.json": validator_weights,
        "vote-weight-accounts.json": nominators,
        "deposit-weight-accounts.json": miners,
        "deposit-weight-nodes.json": mining_assets,
    }


@pytest.fixture
def write_snapshot(tmp_path: Path) -> Callable[[dict[str, Any]], Path]:
    """Write snapshot files under ``<tmp>/state/<HEIGHT>`` and return the state root."""

    def _write(files: dict[str, Any]) -> Path:
        state_dir = tmp_path / "state"
        directory = state_dir / str(HEIGHT)
        directory.mkdir(parents=True, exist_ok=True)
        for filename, content in files.items():
            (directory / filename).write_text(json.dumps(content), encoding="utf-8")
        return state_dir

    return _write


@pytest.fixture
def state_dir(
    write_snapshot: Callable[[dict[str, Any]], Path], snapshot_files: dict[str, Any]
) -> Path:
    """Snapshot root holding the complete sample snapshot."""
    return write_snapshot(snapshot_files)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "res"


@pytest.fixture
def console() -> Console:
    """Console that keeps progress bars and tables out of the test output."""
    return Console(file=StringIO(), width=120)
