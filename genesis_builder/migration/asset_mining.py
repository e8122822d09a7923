"""Correct the total weight of the deposit mining pool.

ChainX v1.0.3 fixed the deposit weight accounting going forward but left the
already accumulated pool weight out of line with the sum of the miners'
weights. The pool weight is recomputed from the miners at migration time.
"""

from collections.abc import Iterable

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from genesis_builder.helpers.address import encode_address
from genesis_builder.helpers.constants import MINING_ASSET
from genesis_builder.helpers.exceptions import IntegrityError
from genesis_builder.helpers.logging import get_logger
from genesis_builder.helpers.parsers import parse_weight, sum_weights
from genesis_builder.migration.models import (
    AuditFlag,
    DepositWeight,
    LegacyMinerEntry,
    Miner,
    MiningAssets,
)


logger = get_logger("asset_mining")


class MiningCorrection(BaseModel):
    """Outcome of the mining weight correction stage."""

    symbol: str = MINING_ASSET
    miners: list[Miner] = Field(default_factory=list)
    legacy_info: DepositWeight = Field(..., description="Pool as exported")
    info: DepositWeight = Field(..., description="Pool with the recomputed weight")
    flags: list[AuditFlag] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def legacy_weight(self) -> int:
        return parse_weight(self.legacy_info.weight)

    @property
    def corrected_weight(self) -> int:
        return parse_weight(self.info.weight)

    def genesis_document(self) -> dict[str, Any]:
        """The ``xmining_asset`` section of the genesis parameters."""
        return {
            f"{self.symbol}_miners": [miner.model_dump() for miner in self.miners],
            f"{self.symbol}_info": self.info.model_dump(by_alias=True),
        }

    def aux_documents(self) -> dict[str, Any]:
        return {
            f"genesis_{self.symbol}_miners.json": [m.model_dump() for m in self.miners],
            # Uncorrected on purpose, to diff against the legacy state.
            f"genesis_{self.symbol}_info.json": self.legacy_info.model_dump(by_alias=True),
        }


def correct_mining_weight(
    legacy_miners: Iterable[LegacyMinerEntry],
    mining_assets: MiningAssets,
    symbol: str = MINING_ASSET,
) -> MiningCorrection:
    """Drop zero-weight miners and recompute the pool weight from the rest.

    Args:
        legacy_miners: Records from deposit-weight-accounts.json
        mining_assets: Pools from deposit-weight-nodes.json
        symbol: Mining asset to correct

    Returns:
        MiningCorrection whose pool weight is the exact sum of the kept miners

    Raises:
        IntegrityError: If the mining asset is missing from the pools
    """
    if symbol not in mining_assets:
        msg = f"Mining asset {symbol!r} not found in the legacy mining pools"
        raise IntegrityError(msg)

    miners: list[Miner] = []
    for entry in legacy_miners:
        position = entry.position(symbol)
        if position is None or position.weight == "0":
            continue
        miners.append(Miner(who=encode_address(entry.account), weight=position.weight))
    total_weight = sum_weights(miner.weight for miner in miners)

    legacy_info = mining_assets[symbol]
    info = legacy_info.model_copy(update={"weight": str(total_weight)})

    flags: list[AuditFlag] = []
    if info.weight != legacy_info.weight:
        detail = (
            f"{symbol} pool weight {legacy_info.weight} replaced by the sum of "
            f"miner weights {info.weight}"
        )
        logger.warning(detail)
        flags.append(AuditFlag(kind="mining_weight_corrected", subject=symbol, detail=detail))

    logger.info(f"Positive {symbol} miners: {len(miners)}, total weight: {total_weight}")

    return MiningCorrection(
        symbol=symbol,
        miners=miners,
        legacy_info=legacy_info,
        info=info,
        flags=flags,
    )


__all__ = ["MiningCorrection", "correct_mining_weight"]
