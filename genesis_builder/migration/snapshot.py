"""Load the legacy state snapshot exported at the migration height."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from genesis_builder.helpers.constants import (
    ACCOUNTS_FILE,
    ASSETS_TOTAL_FILE,
    INTENTIONS_FILE,
    MINERS_FILE,
    MINING_ASSETS_FILE,
    NOMINATORS_FILE,
    VALIDATOR_WEIGHTS_FILE,
)
from genesis_builder.helpers.json_io import load_typed
from genesis_builder.helpers.logging import get_logger
from genesis_builder.migration.models import (
    LegacyAccount,
    LegacyIntention,
    LegacyMinerEntry,
    LegacyNominator,
    MiningAssets,
    TotalAssetInfo,
    ValidatorWeight,
)


class LegacySnapshot(BaseModel):
    """Every snapshot input of the genesis build, read up front."""

    height: int
    accounts: list[LegacyAccount] = Field(default_factory=list)
    intentions: list[LegacyIntention] = Field(default_factory=list)
    validator_weights: list[ValidatorWeight] = Field(default_factory=list)
    nominators: list[LegacyNominator] = Field(default_factory=list)
    miners: list[LegacyMinerEntry] = Field(default_factory=list)
    mining_assets: MiningAssets = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class SnapshotReader:
    """Read the JSON files of one snapshot (``<state_dir>/<height>/<file>``)."""

    def __init__(self, state_dir: Path | str, height: int):
        """Initialize reader.

        Args:
            state_dir: Root directory of the exported snapshots
            height: Migration block height, names the snapshot sub-directory
        """
        self.state_dir = Path(state_dir)
        self.height = height
        self.logger = get_logger("snapshot")

    @property
    def directory(self) -> Path:
        return self.state_dir / str(self.height)

    def path(self, filename: str) -> Path:
        return self.directory / filename

    def accounts(self) -> list[LegacyAccount]:
        return self._load(ACCOUNTS_FILE, list[LegacyAccount])

    def intentions(self) -> list[LegacyIntention]:
        return self._load(INTENTIONS_FILE, list[LegacyIntention])

    def validator_weights(self) -> list[ValidatorWeight]:
        return self._load(VALIDATOR_WEIGHTS_FILE, list[ValidatorWeight])

    def nominators(self) -> list[LegacyNominator]:
        return self._load(NOMINATORS_FILE, list[LegacyNominator])

    def miners(self) -> list[LegacyMinerEntry]:
        return self._load(MINERS_FILE, list[LegacyMinerEntry])

    def mining_assets(self) -> MiningAssets:
        return self._load(MINING_ASSETS_FILE, MiningAssets)

    def assets_total(self) -> list[TotalAssetInfo]:
        return self._load(ASSETS_TOTAL_FILE, list[TotalAssetInfo])

    def load(self) -> LegacySnapshot:
        """Read every input of the genesis build.

        Raises:
            InputReadError: If any file is missing or malformed
        """
        self.logger.info(f"Loading snapshot from {self.directory}")
        return LegacySnapshot(
            height=self.height,
            accounts=self.accounts(),
            intentions=self.intentions(),
            validator_weights=self.validator_weights(),
            nominators=self.nominators(),
            miners=self.miners(),
            mining_assets=self.mining_assets(),
        )

    def _load(self, filename: str, schema: object):
        path = self.path(filename)
        value = load_typed(path, schema)
        if isinstance(value, (list, dict)):
            self.logger.info(f"Loaded {len(value):,} records from {path.name}")
        return value


__all__ = ["LegacySnapshot", "SnapshotReader"]
