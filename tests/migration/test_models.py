"""Tests for the snapshot and genesis models."""

import pytest
from pydantic import ValidationError

from genesis_builder.migration.models import (
    AssetInfo,
    GenesisValidator,
    LegacyAccount,
    LegacyIntention,
    LegacyMinerEntry,
    NodeVote,
    ValidatorWeight,
)
from tests.snapshot_data import (
    ACTIVE,
    ACTIVE_POT,
    ALICE,
    SELF_BONDED,
    btc,
    intention,
    pcx,
    upper,
)


class TestAssetModels:
    """Tests for AssetInfo and LegacyAccount."""

    def test_asset_total_sums_buckets(self) -> None:
        """Test that an asset total covers every bucket."""
        asset = AssetInfo.model_validate(pcx(Free=100, ReservedStaking=50))

        assert asset.total == 150

    def test_asset_lookup(self) -> None:
        """Test looking up an asset by name."""
        account = LegacyAccount.model_validate(
            {"account": ALICE, "assets": [pcx(Free=1), btc(Free=2)]}
        )

        assert account.asset("BTC").total == 2
        assert account.asset("SDOT") is None

    def test_rejects_negative_balance(self) -> None:
        """Test that negative balances are rejected."""
        with pytest.raises(ValidationError):
            AssetInfo.model_validate(pcx(Free=-1))

    def test_rejects_malformed_key(self) -> None:
        """Test that account keys must be 32 bytes of hex."""
        with pytest.raises(ValidationError):
            LegacyAccount.model_validate({"account": "5RzDbX1Z", "assets": []})

    def test_key_is_lower_cased(self) -> None:
        """Test that upper-case hex keys are normalized on the way in."""
        account = LegacyAccount.model_validate(
            {"account": upper(SELF_BONDED), "assets": []}
        )

        assert account.account == SELF_BONDED


class TestLegacyIntention:
    """Tests for LegacyIntention."""

    def test_reads_camel_case_fields(self) -> None:
        """Test that the exported camelCase fields are mapped."""
        record = intention(
            ACTIVE, ACTIVE_POT, jackpot=7, self_vote=3, total_nomination=9, name="node"
        )

        parsed = LegacyIntention.model_validate(record)

        assert parsed.self_vote == 3
        assert parsed.jackpot_account == ACTIVE_POT
        assert parsed.total_nomination == 9

    def test_dump_reproduces_legacy_record(self) -> None:
        """Test that unknown fields survive for the audit documents."""
        record = intention(
            ACTIVE, ACTIVE_POT, jackpot=7, self_vote=3, total_nomination=9, name="node"
        )

        assert LegacyIntention.model_validate(record).model_dump(by_alias=True) == record


class TestWeights:
    """Tests for decimal string weights."""

    def test_integer_weight_is_normalized(self) -> None:
        """Test that integer weights become decimal strings."""
        weight = ValidatorWeight.model_validate({"account": ACTIVE, "weight": 42})

        assert weight.weight == "42"

    def test_leading_zeros_are_normalized(self) -> None:
        """Test that zero weights always compare equal to "0"."""
        vote = NodeVote.model_validate(
            {"account": ACTIVE, "nomination": 0, "weight": "000"}
        )

        assert vote.weight == "0"
        assert not vote.is_significant

    def test_rejects_negative_weight(self) -> None:
        """Test that negative weights are rejected."""
        with pytest.raises(ValidationError):
            ValidatorWeight.model_validate({"account": ACTIVE, "weight": "-1"})

    @pytest.mark.parametrize(
        ("nomination", "weight", "significant"),
        [(0, "0", False), (1, "0", True), (0, "1", True), (5, "7", True)],
    )
    def test_vote_significance(
        self, nomination: int, weight: str, significant: bool
    ) -> None:
        """Test that only zero nomination with zero weight is insignificant."""
        vote = NodeVote.model_validate(
            {"account": ACTIVE, "nomination": nomination, "weight": weight}
        )

        assert vote.is_significant is significant

    def test_total_revocation(self) -> None:
        """Test summing the pending revocations of a vote."""
        vote = NodeVote.model_validate(
            {
                "account": ACTIVE,
                "nomination": 1,
                "weight": "1",
                "revocations": [{"blockNumber": 1, "value": 4}, {"value": 6}],
            }
        )

        assert vote.total_revocation == 10


class TestLegacyMinerEntry:
    """Tests for LegacyMinerEntry positions."""

    def test_known_symbol(self) -> None:
        """Test reading a position of a known mining asset."""
        entry = LegacyMinerEntry.model_validate({"account": ALICE, "xbtc": {"weight": "9"}})

        assert entry.position("xbtc").weight == "9"
        assert entry.position("lbtc") is None

    def test_extra_symbol(self) -> None:
        """Test reading a position of a mining asset added later."""
        entry = LegacyMinerEntry.model_validate({"account": ALICE, "xeth": {"weight": "3"}})

        assert entry.position("xeth").weight == "3"


class TestGenesisValidator:
    """Tests for GenesisValidator."""

    def test_total_weight_is_required(self) -> None:
        """Test that a missing weight must be stated explicitly."""
        with pytest.raises(ValidationError):
            GenesisValidator(who="x", referral_id="r", self_bonded=1, total_nomination=1)

    def test_missing_weight_dumps_as_null(self) -> None:
        """Test that a validator without weight serializes total_weight as None."""
        validator = GenesisValidator(
            who="x", referral_id="r", self_bonded=1, total_nomination=1, total_weight=None
        )

        assert validator.model_dump()["total_weight"] is None
