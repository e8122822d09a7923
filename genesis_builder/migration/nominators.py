"""Compile the legacy nomination records into genesis nominators."""

from collections import defaultdict
from collections.abc import Iterable

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from genesis_builder.helpers.address import encode_address
from genesis_builder.helpers.logging import get_logger
from genesis_builder.migration.models import (
    GenesisNominator,
    LegacyNominator,
    Nomination,
)


logger = get_logger("nominators")


class NominatorCompilation(BaseModel):
    """Outcome of the nominator compilation stage."""

    nominators: list[GenesisNominator] = Field(default_factory=list)
    revocations: dict[str, int] = Field(
        default_factory=dict,
        description="Validator raw key -> pending revocations, for analysis only",
    )
    dropped_nominators: int = 0
    dropped_votes: int = 0

    model_config = ConfigDict(frozen=True)

    def aux_documents(self) -> dict[str, Any]:
        return {
            "genesis_nominators.json": [n.model_dump() for n in self.nominators],
            "genesis_revocations.json": dict(self.revocations),
        }


def compile_nominators(legacy_nominators: Iterable[LegacyNominator]) -> NominatorCompilation:
    """Keep the significant votes of every nominator.

    A vote is dropped only if both its nomination and its weight are zero; a
    nominator left without votes is dropped. Pending revocations are summed per
    validator across all nominators.

    Args:
        legacy_nominators: Records from vote-weight-accounts.json

    Returns:
        NominatorCompilation with the genesis nominators and revocation totals
    """
    nominators: list[GenesisNominator] = []
    revocations: defaultdict[str, int] = defaultdict(int)
    dropped_nominators = 0
    dropped_votes = 0

    for entry in legacy_nominators:
        for vote in entry.nodes:
            total_revocation = vote.total_revocation
            if total_revocation > 0:
                revocations[vote.account] += total_revocation

        nominations = [
            Nomination(
                nominee=encode_address(vote.account),
                nomination=vote.nomination,
                weight=vote.weight,
            )
            for vote in entry.nodes
            if vote.is_significant
        ]
        dropped_votes += len(entry.nodes) - len(nominations)

        if nominations:
            nominators.append(
                GenesisNominator(
                    nominator=encode_address(entry.account),
                    nominations=nominations,
                )
            )
        else:
            dropped_nominators += 1

    logger.info(
        f"Nominators kept: {len(nominators)}, dropped: {dropped_nominators} "
        f"({dropped_votes} zero votes dropped)"
    )
    logger.info(f"Validators with pending revocations: {len(revocations)}")

    return NominatorCompilation(
        nominators=nominators,
        revocations=dict(revocations),
        dropped_nominators=dropped_nominators,
        dropped_votes=dropped_votes,
    )


__all__ = ["NominatorCompilation", "compile_nominators"]
