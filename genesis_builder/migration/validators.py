"""Classify legacy validators (intentions) into dead, dying and active tiers."""

from collections.abc import Iterable, Sequence
from enum import StrEnum

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from genesis_builder.helpers.address import encode_address
from genesis_builder.helpers.constants import MINIMUM_ACTIVE_REWARD_POT_BALANCE
from genesis_builder.helpers.exceptions import IntegrityError
from genesis_builder.helpers.logging import get_logger
from genesis_builder.migration.models import (
    AuditFlag,
    GenesisValidator,
    LegacyIntention,
    ValidatorWeight,
)


logger = get_logger("validators")


class ValidatorTier(StrEnum):
    DEAD = "dead"
    DYING = "dying"
    ACTIVE = "active"


class ValidatorClassification(BaseModel):
    """Outcome of the validator classification stage."""

    dead: list[LegacyIntention] = Field(default_factory=list)
    dying: list[LegacyIntention] = Field(default_factory=list)
    active: list[LegacyIntention] = Field(default_factory=list)
    validators: list[GenesisValidator] = Field(default_factory=list)
    auto_claimed: dict[str, int] = Field(
        default_factory=dict,
        description="Validator address -> reward pot balance credited to it",
    )
    auto_claimed_pots: list[str] = Field(
        default_factory=list,
        description="Reward pot addresses whose balance moved to their validator",
    )
    dying_pot_balance: int = Field(
        default=0, description="Sum of the reward pots of all dying validators"
    )
    reward_pots: list[tuple[str, str]] = Field(
        default_factory=list,
        description="(reward pot address, validator address) of every intention",
    )
    flags: list[AuditFlag] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def total(self) -> int:
        return len(self.dead) + len(self.dying) + len(self.active)

    @property
    def total_auto_claimed(self) -> int:
        return sum(self.auto_claimed.values(), 0)

    def aux_documents(self) -> dict[str, Any]:
        """Audit documents of this stage, keyed by file name."""
        return {
            "intentions_dead.json": _dump_intentions(self.dead),
            "intentions_dying.json": _dump_intentions(self.dying),
            "intentions_active.json": _dump_intentions(self.active),
            "genesis_validators.json": [v.model_dump() for v in self.validators],
            "genesis_balances_auto_claimed.json": dict(self.auto_claimed),
        }


def _dump_intentions(intentions: Iterable[LegacyIntention]) -> list[dict[str, Any]]:
    return [intention.model_dump(by_alias=True) for intention in intentions]


def classify_intention(
    jackpot: int,
    total_nomination: int,
    self_vote: int,
    threshold: int = MINIMUM_ACTIVE_REWARD_POT_BALANCE,
) -> tuple[ValidatorTier, bool]:
    """Classify one validator from its reward pot and nominations.

    Args:
        jackpot: Reward pot balance
        total_nomination: Total nomination, self vote included
        self_vote: Nomination of the validator for itself
        threshold: Minimum reward pot balance of an active validator

    Returns:
        Tuple of (tier, whether the reward pot is auto-claimed)

    Example:
        >>> classify_intention(0, 0, 0)
        (<ValidatorTier.DEAD: 'dead'>, False)
        >>> classify_intention(50, 100, 100)
        (<ValidatorTier.DYING: 'dying'>, True)
    """
    if jackpot == 0:
        # Nobody ever funded the pot, safe to drop whatever the nominations are.
        return ValidatorTier.DEAD, False
    if jackpot < threshold:
        # Only a self-bonded validator owns the whole pot.
        auto_claim = total_nomination != 0 and self_vote == total_nomination
        return ValidatorTier.DYING, auto_claim
    return ValidatorTier.ACTIVE, False


def classify_validators(
    intentions: Sequence[LegacyIntention],
    weights: Iterable[ValidatorWeight],
    *,
    threshold: int = MINIMUM_ACTIVE_REWARD_POT_BALANCE,
    strict: bool = False,
) -> ValidatorClassification:
    """Partition legacy validators and compute the auto-claimed reward pots.

    Args:
        intentions: Legacy validator candidates
        weights: Recomputed vote weights, matched to active validators by address
        threshold: Minimum reward pot balance of an active validator
        strict: Raise instead of flagging an active validator without weight

    Returns:
        ValidatorClassification with every intention in exactly one tier

    Raises:
        IntegrityError: In strict mode, if an active validator has no weight record
    """
    logger.info(f"Legacy intentions count: {len(intentions)}")

    tiers: dict[ValidatorTier, list[LegacyIntention]] = {tier: [] for tier in ValidatorTier}
    auto_claimed: dict[str, int] = {}
    auto_claimed_pots: list[str] = []
    dying_pot_balance = 0
    reward_pots: list[tuple[str, str]] = []

    for intention in intentions:
        who = encode_address(intention.account)
        pot = encode_address(intention.jackpot_account)
        reward_pots.append((pot, who))
        tier, auto_claim = classify_intention(
            intention.jackpot,
            intention.total_nomination,
            intention.self_vote,
            threshold,
        )

        if tier is ValidatorTier.DYING:
            dying_pot_balance += intention.jackpot
            if auto_claim:
                auto_claimed[who] = intention.jackpot
                auto_claimed_pots.append(pot)

        tiers[tier].append(intention.model_copy(update={"account": who}))

    logger.info(f"Dead intentions count: {len(tiers[ValidatorTier.DEAD])}")
    logger.info(
        f"Dying intentions count: {len(tiers[ValidatorTier.DYING])}, "
        f"total dying intention reward pot balance: {dying_pot_balance}"
    )
    logger.info(f"Active intentions count: {len(tiers[ValidatorTier.ACTIVE])}")

    weight_of = {encode_address(entry.account): entry.weight for entry in weights}

    validators: list[GenesisValidator] = []
    flags: list[AuditFlag] = []
    for intention in tiers[ValidatorTier.ACTIVE]:
        total_weight = weight_of.get(intention.account)
        if total_weight is None:
            msg = f"Active validator {intention.account} ({intention.name}) has no weight record"
            if strict:
                raise IntegrityError(msg)
            logger.warning(msg)
            flags.append(
                AuditFlag(
                    kind="missing_validator_weight",
                    subject=intention.account,
                    detail=msg,
                )
            )
        validators.append(
            GenesisValidator(
                who=intention.account,
                referral_id=intention.name,
                self_bonded=intention.self_vote,
                total_nomination=intention.total_nomination,
                total_weight=total_weight,
            )
        )

    return ValidatorClassification(
        dead=tiers[ValidatorTier.DEAD],
        dying=tiers[ValidatorTier.DYING],
        active=tiers[ValidatorTier.ACTIVE],
        validators=validators,
        auto_claimed=auto_claimed,
        auto_claimed_pots=auto_claimed_pots,
        dying_pot_balance=dying_pot_balance,
        reward_pots=reward_pots,
        flags=flags,
    )


__all__ = [
    "ValidatorClassification",
    "ValidatorTier",
    "classify_intention",
    "classify_validators",
]
