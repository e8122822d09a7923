"""Pydantic models for the legacy snapshot and the genesis parameters.

Snapshot models mirror the camelCase JSON exported from the 1.0 chain and keep
unknown fields, so the audit documents can reproduce the legacy records.
Genesis models use the snake_case field names the 2.0 genesis builder reads.
"""

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    NonNegativeInt,
    StringConstraints,
)
from pydantic.alias_generators import to_camel

from genesis_builder.helpers.parsers import parse_weight, sum_balance_details


def _normalize_weight(value: Any) -> Any:
    # Weights are u128 on chain, exported as strings; accept plain integers too.
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        return str(parse_weight(value))
    return value


RawKey = Annotated[
    str, StringConstraints(pattern=r"^0x[0-9a-fA-F]{64}$", to_lower=True)
]
"""Hex encoded 32-byte public key as exported from the legacy chain"""

Weight = Annotated[str, BeforeValidator(_normalize_weight)]
"""Arbitrary-precision non-negative integer kept as a decimal string"""


class SnapshotModel(BaseModel):
    """Base for records read from the legacy snapshot."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )


class GenesisModel(BaseModel):
    """Base for records written to the genesis parameters."""

    model_config = ConfigDict(frozen=True)


# Legacy snapshot


class AssetInfo(SnapshotModel):
    """Balances of one asset, split in buckets (Free, ReservedStaking, ...)."""

    name: str
    details: dict[str, NonNegativeInt] = Field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum_balance_details(self.details)


class LegacyAccount(SnapshotModel):
    """Account with its per-asset balances at the migration height."""

    account: RawKey
    assets: list[AssetInfo] = Field(default_factory=list)

    def asset(self, name: str) -> AssetInfo | None:
        """First asset record with the given name, if any."""
        return next((asset for asset in self.assets if asset.name == name), None)


class TotalAssetInfo(SnapshotModel):
    """Chain-wide totals of one asset (assets-total.json)."""

    name: str
    details: dict[str, NonNegativeInt] = Field(default_factory=dict)


class LegacyIntention(SnapshotModel):
    """Validator candidate on the legacy chain."""

    account: RawKey = Field(
        ..., description="Raw key; classified copies carry the address instead"
    )
    name: str
    self_vote: NonNegativeInt
    jackpot: NonNegativeInt = Field(..., description="Reward pot balance")
    jackpot_account: RawKey
    total_nomination: NonNegativeInt


class ValidatorWeight(SnapshotModel):
    """Recomputed vote weight of a validator (vote-weight-nodes.json)."""

    account: RawKey
    nomination: NonNegativeInt | None = None
    weight: Weight


class Revocation(SnapshotModel):
    """Pending withdrawal of a nomination."""

    value: NonNegativeInt


class NodeVote(SnapshotModel):
    """One nominator's vote for one validator."""

    account: RawKey = Field(..., description="Nominated validator")
    nomination: NonNegativeInt
    weight: Weight
    revocations: list[Revocation] = Field(default_factory=list)

    @property
    def total_revocation(self) -> int:
        return sum((revocation.value for revocation in self.revocations), 0)

    @property
    def is_significant(self) -> bool:
        """Only a zero nomination with zero weight can be dropped safely."""
        return self.nomination != 0 or self.weight != "0"


class LegacyNominator(SnapshotModel):
    """Votes of one nominator across validators (vote-weight-accounts.json)."""

    account: RawKey
    nodes: list[NodeVote] = Field(default_factory=list)


class DepositWeight(SnapshotModel):
    """Deposit mining position or pool of one mining asset."""

    weight: Weight


class LegacyMinerEntry(SnapshotModel):
    """Deposit mining positions of one account (deposit-weight-accounts.json)."""

    account: RawKey
    xbtc: DepositWeight | None = None
    lbtc: DepositWeight | None = None
    sdot: DepositWeight | None = None

    def position(self, symbol: str) -> DepositWeight | None:
        """Position in the given mining asset, if the account has one."""
        if symbol in type(self).model_fields:
            return getattr(self, symbol)
        extra = (self.model_extra or {}).get(symbol)
        return None if extra is None else DepositWeight.model_validate(extra)


MiningAssets = dict[str, DepositWeight]
"""Mining pools keyed by asset symbol (deposit-weight-nodes.json)"""


# Genesis parameters


class GenesisValidator(GenesisModel):
    """Validator carried over to the new chain."""

    who: str
    referral_id: str
    self_bonded: int
    total_nomination: int
    total_weight: str | None = Field(
        ..., description="None when the snapshot has no weight record for it"
    )


class FreeBalance(GenesisModel):
    """Free balance keyed by address or by raw public key."""

    who: str
    free: int


class Nomination(GenesisModel):
    nominee: str
    nomination: int
    weight: str


class GenesisNominator(GenesisModel):
    nominator: str
    nominations: list[Nomination]


class Miner(GenesisModel):
    """Deposit miner with a positive weight."""

    who: str
    weight: str


class WellknownAccounts(GenesisModel):
    """Legacy accounts the new chain handles specially."""

    legacy_council: str
    legacy_team: str
    legacy_pots: list[tuple[str, str]] = Field(
        ..., description="(reward pot address, validator address) pairs"
    )
    legacy_xbtc_pot: str


class AuditFlag(GenesisModel):
    """Data quality finding surfaced in the audit document."""

    kind: str
    subject: str
    detail: str


__all__ = [
    "AssetInfo",
    "AuditFlag",
    "DepositWeight",
    "FreeBalance",
    "GenesisModel",
    "GenesisNominator",
    "GenesisValidator",
    "LegacyAccount",
    "LegacyIntention",
    "LegacyMinerEntry",
    "LegacyNominator",
    "Miner",
    "MiningAssets",
    "NodeVote",
    "Nomination",
    "RawKey",
    "Revocation",
    "SnapshotModel",
    "TotalAssetInfo",
    "ValidatorWeight",
    "Weight",
    "WellknownAccounts",
]
