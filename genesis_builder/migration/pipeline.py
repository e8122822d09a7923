"""Build the ChainX 2.0 genesis parameters from the 1.0 state snapshot."""

from collections.abc import Iterable, Mapping
from pathlib import Path

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.table import Table

from genesis_builder.helpers.address import decode_address
from genesis_builder.helpers.constants import (
    AUX_DIR_NAME,
    GENESIS_PARAMS_PATH,
    MINIMUM_ACTIVE_REWARD_POT_BALANCE,
    MINING_ASSET,
)
from genesis_builder.helpers.exceptions import IntegrityError
from genesis_builder.helpers.json_io import write_json
from genesis_builder.helpers.logging import get_logger
from genesis_builder.helpers.progress import track_items
from genesis_builder.migration.asset_mining import MiningCorrection, correct_mining_weight
from genesis_builder.migration.balances import BalanceReconciliation, reconcile_balances
from genesis_builder.migration.models import (
    AuditFlag,
    FreeBalance,
    GenesisNominator,
    GenesisValidator,
    WellknownAccounts,
)
from genesis_builder.migration.nominators import NominatorCompilation, compile_nominators
from genesis_builder.migration.snapshot import LegacySnapshot, SnapshotReader
from genesis_builder.migration.validators import (
    ValidatorClassification,
    classify_validators,
)


class GenesisParams(BaseModel):
    """Consolidated genesis parameters of the new chain."""

    free_balances: list[FreeBalance]
    pubkey_balances: list[FreeBalance]
    wellknown_accounts: WellknownAccounts
    xassets: list[FreeBalance]
    validators: list[GenesisValidator]
    nominators: list[GenesisNominator]
    xmining_asset: dict[str, Any]
    flags: list[AuditFlag] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def total_issuance(self) -> int:
        return sum((balance.free for balance in self.free_balances), 0)

    def balances_document(self) -> dict[str, Any]:
        return {
            "free_balances": [b.model_dump() for b in self.free_balances],
            "wellknown_accounts": self.wellknown_accounts.model_dump(),
        }

    def xstaking_document(self) -> dict[str, Any]:
        return {
            "validators": [v.model_dump() for v in self.validators],
            "nominators": [n.model_dump() for n in self.nominators],
        }

    def document(self) -> dict[str, Any]:
        """The genesis_builder_params.json document."""
        return {
            "balances": self.balances_document(),
            "xassets": [b.model_dump() for b in self.xassets],
            "xstaking": self.xstaking_document(),
            "xmining_asset": self.xmining_asset,
        }


def merge_auto_claimed(
    free_balances: Iterable[FreeBalance], auto_claimed: Mapping[str, int]
) -> list[FreeBalance]:
    """Credit the auto-claimed reward pots to their validators.

    Validators without a free balance of their own get a new entry, appended
    in claim order, so no claimed amount is lost.

    Args:
        free_balances: Address keyed balances from the reconciliation stage
        auto_claimed: Validator address -> claimed reward pot balance

    Returns:
        The merged balances
    """
    merged: list[FreeBalance] = []
    credited: set[str] = set()
    for balance in free_balances:
        claimed = auto_claimed.get(balance.who)
        if claimed is None or balance.who in credited:
            merged.append(balance)
        else:
            credited.add(balance.who)
            merged.append(FreeBalance(who=balance.who, free=balance.free + claimed))

    merged.extend(
        FreeBalance(who=who, free=amount)
        for who, amount in auto_claimed.items()
        if who not in credited
    )
    return merged


def mirror_by_pubkey(free_balances: Iterable[FreeBalance]) -> list[FreeBalance]:
    """Re-key address keyed balances by raw public key."""
    return [
        FreeBalance(who=decode_address(balance.who), free=balance.free)
        for balance in free_balances
    ]


def check_conservation(
    reconciliation: BalanceReconciliation,
    classification: ValidatorClassification,
    merged: list[FreeBalance],
    pubkey_balances: list[FreeBalance],
) -> None:
    """Check the merged balances against the stage outputs.

    Raises:
        IntegrityError: If an amount was created or lost while merging, or the
            two keyings disagree
    """
    reconciled = sum((b.free for b in reconciliation.free_balances), 0)
    expected = reconciled + classification.total_auto_claimed
    actual = sum((b.free for b in merged), 0)
    if actual != expected:
        msg = (
            f"Merged free balances total {actual} != reconciled {reconciled} "
            f"+ auto-claimed {classification.total_auto_claimed}"
        )
        raise IntegrityError(msg)

    if len(merged) != len(pubkey_balances) or any(
        a.free != b.free for a, b in zip(merged, pubkey_balances, strict=True)
    ):
        msg = "Public key keyed balances do not mirror the address keyed balances"
        raise IntegrityError(msg)


class GenesisBuilder:
    """Run the migration stages in order and write the genesis documents."""

    def __init__(
        self,
        state_dir: Path | str,
        output_dir: Path | str,
        height: int,
        *,
        threshold: int = MINIMUM_ACTIVE_REWARD_POT_BALANCE,
        mining_asset: str = MINING_ASSET,
        strict_weights: bool = False,
        log_level: str = "INFO",
        console: Console | None = None,
    ):
        """Initialize builder.

        Args:
            state_dir: Root directory of the exported 1.0 snapshots
            output_dir: Root directory of the generated documents
            height: Migration block height
            threshold: Minimum reward pot balance of an active validator
            mining_asset: Deposit mining asset whose pool weight is corrected
            strict_weights: Abort when an active validator has no weight record
            log_level: Log level of the builder logger
            console: Rich console for progress and summaries
        """
        self.reader = SnapshotReader(state_dir, height)
        self.output_dir = Path(output_dir)
        self.height = height
        self.threshold = threshold
        self.mining_asset = mining_asset
        self.strict_weights = strict_weights
        self.logger = get_logger("genesis_builder", log_level=log_level)
        self.console = console or Console()

    @property
    def aux_dir(self) -> Path:
        return self.output_dir / AUX_DIR_NAME

    @property
    def params_path(self) -> Path:
        return self.output_dir / GENESIS_PARAMS_PATH

    def _write_aux(self, documents: Mapping[str, Any]) -> None:
        for filename, document in documents.items():
            write_json(self.aux_dir / filename, document)

    def run(self) -> GenesisParams:
        """Run every stage and write the documents.

        The consolidated parameters are written last, and only once every
        stage succeeded.

        Returns:
            The genesis parameters

        Raises:
            GenesisBuilderError: If any stage fails
        """
        self.console.print(
            f"[bold blue]Building genesis parameters from height {self.height:,}[/bold blue]"
        )
        # A stale document from an earlier run must not outlive a failed one.
        if self.params_path.exists():
            self.logger.info(f"Removing previous {self.params_path}")
            self.params_path.unlink()

        snapshot = self.reader.load()

        mining = correct_mining_weight(
            snapshot.miners, snapshot.mining_assets, self.mining_asset
        )
        self._write_aux(mining.aux_documents())

        nominators = compile_nominators(snapshot.nominators)
        self._write_aux(nominators.aux_documents())

        classification = classify_validators(
            snapshot.intentions,
            snapshot.validator_weights,
            threshold=self.threshold,
            strict=self.strict_weights,
        )
        self._write_aux(classification.aux_documents())
        self.logger.info(f"Total autoClaimed: {classification.total_auto_claimed}")

        reconciliation = reconcile_balances(
            track_items(
                snapshot.accounts, "Reconciling balances", console=self.console
            ),
            classification,
        )
        self._write_aux(reconciliation.aux_documents())

        params = self.assemble(mining, nominators, classification, reconciliation)

        self._write_aux(
            {
                "genesis_xstaking.json": params.xstaking_document(),
                "genesis_balances.json": params.balances_document(),
                "genesis_xminingasset.json": params.xmining_asset,
                "genesis_balances_in_pubkey.json": [
                    b.model_dump() for b in params.pubkey_balances
                ],
                "genesis_audit.json": self.audit_document(
                    snapshot, classification, reconciliation, params
                ),
            }
        )

        write_json(self.params_path, params.document(), atomic=True)

        self._display_summary(classification, nominators, mining, reconciliation, params)
        return params

    def assemble(
        self,
        mining: MiningCorrection,
        nominators: NominatorCompilation,
        classification: ValidatorClassification,
        reconciliation: BalanceReconciliation,
    ) -> GenesisParams:
        """Merge the stage outputs into the genesis parameters."""
        merged = merge_auto_claimed(
            reconciliation.free_balances, classification.auto_claimed
        )
        pubkey_balances = mirror_by_pubkey(merged)
        check_conservation(reconciliation, classification, merged, pubkey_balances)

        return GenesisParams(
            free_balances=merged,
            pubkey_balances=pubkey_balances,
            wellknown_accounts=reconciliation.wellknown_accounts,
            xassets=reconciliation.xassets,
            validators=classification.validators,
            nominators=nominators.nominators,
            xmining_asset=mining.genesis_document(),
            flags=[*mining.flags, *classification.flags],
        )

    def audit_document(
        self,
        snapshot: LegacySnapshot,
        classification: ValidatorClassification,
        reconciliation: BalanceReconciliation,
        params: GenesisParams,
    ) -> dict[str, Any]:
        """Counts and findings for the manual review of the build."""
        return {
            "height": snapshot.height,
            "flags": [flag.model_dump() for flag in params.flags],
            "intentions": {
                "total": len(snapshot.intentions),
                "dead": len(classification.dead),
                "dying": len(classification.dying),
                "active": len(classification.active),
                "dying_pot_balance": classification.dying_pot_balance,
                "auto_claimed": classification.total_auto_claimed,
            },
            "accounts": {
                "total": reconciliation.total_accounts,
                "zero_pcx": reconciliation.zero_count,
                "zero_btc": reconciliation.zero_btc_count,
                "skipped_pots": reconciliation.skipped_pots,
                "treasury_balance": reconciliation.treasury_balance,
            },
            "total_issuance": params.total_issuance,
        }

    def _display_summary(
        self,
        classification: ValidatorClassification,
        nominators: NominatorCompilation,
        mining: MiningCorrection,
        reconciliation: BalanceReconciliation,
        params: GenesisParams,
    ) -> None:
        table = Table(title="Genesis Build Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right", style="yellow")

        table.add_row("Dead intentions", f"{len(classification.dead):,}")
        table.add_row("Dying intentions", f"{len(classification.dying):,}")
        table.add_row("Active validators", f"{len(classification.validators):,}")
        table.add_row("Auto-claimed pots", f"{len(classification.auto_claimed):,}")
        table.add_row("Auto-claimed total", f"{classification.total_auto_claimed:,}")
        table.add_row("Nominators", f"{len(nominators.nominators):,}")
        table.add_row(f"{mining.symbol} miners", f"{len(mining.miners):,}")
        table.add_row(f"{mining.symbol} legacy weight", f"{mining.legacy_weight:,}")
        table.add_row(f"{mining.symbol} corrected weight", f"{mining.corrected_weight:,}")
        table.add_row("Accounts", f"{reconciliation.total_accounts:,}")
        table.add_row("Zero PCX accounts", f"{reconciliation.zero_count:,}")
        table.add_row("Free balances", f"{len(params.free_balances):,}")
        table.add_row("Treasury balance", f"{reconciliation.treasury_balance:,}")
        table.add_row("Total issuance", f"{params.total_issuance:,}")
        table.add_row("X-BTC balances", f"{len(params.xassets):,}")

        self.console.print(table)

        if params.flags:
            self.console.print(
                f"[yellow]{len(params.flags)} audit flag(s), see "
                f"{self.aux_dir / 'genesis_audit.json'}[/yellow]"
            )
        self.console.print(
            f"[bold green]✓ Genesis parameters saved to {self.params_path}[/bold green]"
        )


__all__ = [
    "GenesisBuilder",
    "GenesisParams",
    "check_conservation",
    "merge_auto_claimed",
    "mirror_by_pubkey",
]
