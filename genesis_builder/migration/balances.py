"""Reconcile legacy account balances into genesis free balances."""

from collections.abc import Iterable, Sequence

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from genesis_builder.helpers.address import encode_address
from genesis_builder.helpers.constants import (
    BRIDGED_ASSET,
    LEGACY_COUNCIL_ACCOUNT,
    LEGACY_TEAM_ACCOUNT,
    LEGACY_XBTC_ACCOUNT,
    SETTLEMENT_ASSET,
    SYSTEM_ACCOUNTS,
)
from genesis_builder.helpers.exceptions import IntegrityError
from genesis_builder.helpers.logging import get_logger
from genesis_builder.helpers.parsers import to_balance
from genesis_builder.migration.models import (
    FreeBalance,
    LegacyAccount,
    WellknownAccounts,
)
from genesis_builder.migration.validators import ValidatorClassification


logger = get_logger("balances")


class BalanceReconciliation(BaseModel):
    """Outcome of the balance reconciliation stage."""

    free_balances: list[FreeBalance] = Field(
        default_factory=list,
        description="PCX balances by address, the treasury entry last",
    )
    pubkey_balances: list[FreeBalance] = Field(
        default_factory=list,
        description="Same entries as free_balances, keyed by raw public key",
    )
    xassets: list[FreeBalance] = Field(
        default_factory=list, description="X-BTC balances by address"
    )
    wellknown_accounts: WellknownAccounts
    treasury_balance: int = 0
    total_accounts: int = 0
    zero_count: int = 0
    zero_btc_count: int = 0
    skipped_pots: list[str] = Field(
        default_factory=list,
        description="Auto-claimed reward pots left out of the free balances",
    )

    model_config = ConfigDict(frozen=True)

    def aux_documents(self) -> dict[str, Any]:
        return {
            "genesis_balances_pure.json": [b.model_dump() for b in self.free_balances],
            "genesis_xassets.json": [b.model_dump() for b in self.xassets],
            "genesis_wellknown_accounts.json": self.wellknown_accounts.model_dump(),
            "genesis_balances_pubkey_pure.json": [
                b.model_dump() for b in self.pubkey_balances
            ],
        }


def build_wellknown_accounts(reward_pots: Sequence[tuple[str, str]]) -> WellknownAccounts:
    """Legacy accounts the new chain needs to know about."""
    return WellknownAccounts(
        legacy_council=encode_address(LEGACY_COUNCIL_ACCOUNT),
        legacy_team=encode_address(LEGACY_TEAM_ACCOUNT),
        legacy_pots=list(reward_pots),
        legacy_xbtc_pot=encode_address(LEGACY_XBTC_ACCOUNT),
    )


def reconcile_balances(
    accounts: Iterable[LegacyAccount],
    classification: ValidatorClassification,
    *,
    system_accounts: Sequence[str] = SYSTEM_ACCOUNTS,
) -> BalanceReconciliation:
    """Collect the positive PCX and X-BTC balances of the legacy accounts.

    The PCX of the system accounts is folded into a treasury balance credited
    to the first system account. Reward pots auto-claimed during validator
    classification are left out, their balance goes to the validator instead.

    Args:
        accounts: Records from assets.json
        classification: Result of the validator classification stage
        system_accounts: Raw keys of the accounts redirected to the treasury

    Returns:
        BalanceReconciliation with the address and public key keyed tables

    Raises:
        IntegrityError: If an account is listed twice or the treasury balance
            overflows the Balance type
    """
    if not system_accounts:
        msg = "At least one system account is required to hold the treasury"
        raise ValueError(msg)

    system_keys = frozenset(system_accounts)
    excluded_pots = frozenset(classification.auto_claimed_pots)

    free_balances: list[FreeBalance] = []
    pubkey_balances: list[FreeBalance] = []
    xassets: list[FreeBalance] = []
    skipped_pots: list[str] = []
    treasury_balance = 0
    total_accounts = 0
    zero_count = 0
    zero_btc_count = 0
    seen: set[str] = set()

    for entry in accounts:
        if entry.account in seen:
            msg = f"Account {entry.account} appears more than once in the snapshot"
            raise IntegrityError(msg)
        seen.add(entry.account)
        total_accounts += 1
        who = encode_address(entry.account)

        pcx = entry.asset(SETTLEMENT_ASSET)
        if entry.account in system_keys:
            if pcx is not None and pcx.total > 0:
                treasury_balance += pcx.total
        elif pcx is not None:
            free = pcx.total
            if free == 0:
                zero_count += 1
            elif who in excluded_pots:
                skipped_pots.append(who)
            else:
                free_balances.append(FreeBalance(who=who, free=free))
                pubkey_balances.append(FreeBalance(who=entry.account, free=free))

        btc = entry.asset(BRIDGED_ASSET)
        if btc is not None:
            if btc.total > 0:
                xassets.append(FreeBalance(who=who, free=btc.total))
            else:
                zero_btc_count += 1

    treasury_balance = to_balance(treasury_balance, label="Treasury balance")
    treasury_account = system_accounts[0]
    free_balances.append(
        FreeBalance(who=encode_address(treasury_account), free=treasury_balance)
    )
    pubkey_balances.append(FreeBalance(who=treasury_account, free=treasury_balance))

    logger.info(f"Total accounts: {total_accounts}")
    logger.info(f"Zero {SETTLEMENT_ASSET} accounts: {zero_count}")
    logger.info(f"Treasury balance: {treasury_balance}")
    logger.info(f"Skipped auto-claimed reward pots: {len(skipped_pots)}")
    logger.info(f"Total positive {BRIDGED_ASSET} accounts: {len(xassets)}")
    logger.info(f"Zero {BRIDGED_ASSET} accounts: {zero_btc_count}")

    return BalanceReconciliation(
        free_balances=free_balances,
        pubkey_balances=pubkey_balances,
        xassets=xassets,
        wellknown_accounts=build_wellknown_accounts(classification.reward_pots),
        treasury_balance=treasury_balance,
        total_accounts=total_accounts,
        zero_count=zero_count,
        zero_btc_count=zero_btc_count,
        skipped_pots=skipped_pots,
    )


__all__ = ["BalanceReconciliation", "build_wellknown_accounts", "reconcile_balances"]
