"""Pre-flight verification of the legacy snapshot.

The exported files are cross-checked against each other before the genesis
build: per-account asset balances against the chain totals, validator vote
weights against the nominator records, and mining pool weights against the
miners. Only the first two block a build; the mining pool mismatch is the
known defect the build corrects.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.table import Table

from genesis_builder.helpers.constants import AUX_DIR_NAME, VERIFIED_ASSETS
from genesis_builder.helpers.json_io import write_json
from genesis_builder.helpers.logging import get_logger
from genesis_builder.helpers.parsers import parse_weight
from genesis_builder.migration.models import (
    LegacyAccount,
    LegacyMinerEntry,
    LegacyNominator,
    MiningAssets,
    TotalAssetInfo,
    ValidatorWeight,
)
from genesis_builder.migration.snapshot import SnapshotReader


logger = get_logger("audit")

MAX_REPORTED_FINDINGS = 50


class CheckResult(BaseModel):
    """Outcome of one verification."""

    name: str
    checked: int = 0
    findings: list[str] = Field(default_factory=list)
    blocking: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def passed(self) -> bool:
        return not self.findings


class VerificationReport(BaseModel):
    height: int
    checks: list[CheckResult] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def passed(self) -> bool:
        """True unless a blocking check has findings."""
        return all(check.passed for check in self.checks if check.blocking)


def _nonzero(details: dict[str, int]) -> dict[str, int]:
    return {bucket: amount for bucket, amount in details.items() if amount != 0}


def verify_asset_totals(
    accounts: Iterable[LegacyAccount],
    totals: Iterable[TotalAssetInfo],
    assets: Sequence[str] = VERIFIED_ASSETS,
) -> CheckResult:
    """Per asset and bucket, the account balances must add up to the totals.

    Zero buckets are ignored on both sides.
    """
    summed: dict[str, defaultdict[str, int]] = {name: defaultdict(int) for name in assets}
    for entry in accounts:
        for asset in entry.assets:
            if asset.name in summed:
                for bucket, amount in asset.details.items():
                    summed[asset.name][bucket] += amount

    expected = {total.name: total.details for total in totals if total.name in summed}

    findings = []
    for name in assets:
        if name not in expected:
            findings.append(f"{name}: missing from the asset totals")
            continue
        actual = _nonzero(dict(summed[name]))
        wanted = _nonzero(expected[name])
        for bucket in sorted(actual.keys() | wanted.keys()):
            if actual.get(bucket, 0) != wanted.get(bucket, 0):
                findings.append(
                    f"{name}/{bucket}: accounts sum to {actual.get(bucket, 0)}, "
                    f"total is {wanted.get(bucket, 0)}"
                )

    return CheckResult(name="asset_totals", checked=len(assets), findings=findings)


def verify_vote_weights(
    nominators: Iterable[LegacyNominator],
    weights: Iterable[ValidatorWeight],
) -> CheckResult:
    """Validator weights must equal the aggregate of their nominators' votes.

    Only votes with a non-zero weight are aggregated.
    """
    aggregated: dict[str, tuple[int, int]] = {}
    for entry in nominators:
        for vote in entry.nodes:
            weight = parse_weight(vote.weight)
            if weight == 0:
                continue
            nomination, total = aggregated.get(vote.account, (0, 0))
            aggregated[vote.account] = (nomination + vote.nomination, total + weight)

    recorded = {entry.account: entry for entry in weights}

    findings = []
    for account in sorted(aggregated.keys() | recorded.keys()):
        if account not in recorded:
            findings.append(f"{account}: nominated but has no weight record")
            continue
        if account not in aggregated:
            # Validators nobody weighs for yet are fine if their record is empty.
            if parse_weight(recorded[account].weight) != 0:
                findings.append(f"{account}: weight record without nominations")
            continue
        nomination, weight = aggregated[account]
        entry = recorded[account]
        if entry.nomination is not None and entry.nomination != nomination:
            findings.append(
                f"{account}: nomination {nomination} != recorded {entry.nomination}"
            )
        if parse_weight(entry.weight) != weight:
            findings.append(f"{account}: weight {weight} != recorded {entry.weight}")

    return CheckResult(
        name="vote_weights",
        checked=len(aggregated.keys() | recorded.keys()),
        findings=findings,
    )


def verify_mining_weights(
    miners: Sequence[LegacyMinerEntry],
    mining_assets: MiningAssets,
) -> CheckResult:
    """Report the pools whose stored weight differs from their miners' sum."""
    findings = []
    for symbol, pool in sorted(mining_assets.items()):
        total = 0
        for entry in miners:
            position = entry.position(symbol)
            if position is not None:
                total += parse_weight(position.weight)
        if parse_weight(pool.weight) != total:
            findings.append(
                f"{symbol}: pool weight {pool.weight} != sum of miner weights {total}"
            )

    return CheckResult(
        name="mining_weights",
        checked=len(mining_assets),
        findings=findings,
        blocking=False,
    )


class SnapshotAuditor:
    """Cross-check the snapshot files and report the findings."""

    def __init__(
        self,
        state_dir: Path | str,
        output_dir: Path | str,
        height: int,
        console: Console | None = None,
    ):
        self.reader = SnapshotReader(state_dir, height)
        self.output_dir = Path(output_dir)
        self.height = height
        self.console = console or Console()

    @property
    def report_path(self) -> Path:
        return self.output_dir / AUX_DIR_NAME / "snapshot_verification.json"

    def run(self) -> VerificationReport:
        """Run every check and write the report.

        Raises:
            InputReadError: If a snapshot file is missing or malformed
        """
        accounts = self.reader.accounts()
        nominators = self.reader.nominators()
        miners = self.reader.miners()

        report = VerificationReport(
            height=self.height,
            checks=[
                verify_asset_totals(accounts, self.reader.assets_total()),
                verify_vote_weights(nominators, self.reader.validator_weights()),
                verify_mining_weights(miners, self.reader.mining_assets()),
            ],
        )

        for check in report.checks:
            for finding in check.findings[:MAX_REPORTED_FINDINGS]:
                if check.blocking:
                    logger.error(f"[{check.name}] {finding}")
                else:
                    logger.warning(f"[{check.name}] {finding}")

        write_json(self.report_path, report.model_dump())
        self._display_report(report)
        return report

    def _display_report(self, report: VerificationReport) -> None:
        table = Table(title=f"Snapshot Verification (height {report.height:,})")
        table.add_column("Check", style="cyan")
        table.add_column("Checked", justify="right", style="yellow")
        table.add_column("Findings", justify="right")
        table.add_column("Status")

        for check in report.checks:
            if check.passed:
                status = "[green]PASS[/green]"
            elif check.blocking:
                status = "[red]FAIL[/red]"
            else:
                status = "[yellow]WARN[/yellow]"
            table.add_row(check.name, f"{check.checked:,}", f"{len(check.findings):,}", status)

        self.console.print(table)


__all__ = [
    "CheckResult",
    "SnapshotAuditor",
    "VerificationReport",
    "verify_asset_totals",
    "verify_mining_weights",
    "verify_vote_weights",
]
