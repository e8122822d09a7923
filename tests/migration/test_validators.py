"""Tests for the validator classification stage."""

from typing import Any

import pytest

from genesis_builder.helpers.address import encode_address
from genesis_builder.helpers.constants import MINIMUM_ACTIVE_REWARD_POT_BALANCE
from genesis_builder.helpers.exceptions import IntegrityError
from genesis_builder.migration.models import LegacyIntention, ValidatorWeight
from genesis_builder.migration.validators import (
    ValidatorClassification,
    ValidatorTier,
    classify_intention,
    classify_validators,
)
from tests.snapshot_data import (
    ACTIVE,
    ACTIVE_POT,
    ACTIVE_WEIGHT,
    DEAD,
    MIXED,
    NO_BALANCE,
    NO_BALANCE_POT,
    SELF_BONDED,
    SELF_BONDED_POT,
    UNBACKED,
    UNWEIGHED,
)


def classify(
    intentions: list[dict[str, Any]],
    weights: list[dict[str, Any]],
    **kwargs: Any,
) -> ValidatorClassification:
    return classify_validators(
        [LegacyIntention.model_validate(record) for record in intentions],
        [ValidatorWeight.model_validate(record) for record in weights],
        **kwargs,
    )


class TestClassifyIntention:
    """Tests for classify_intention function."""

    def test_empty_pot_is_dead(self) -> None:
        """Test that a never funded reward pot is dead."""
        assert classify_intention(0, 0, 0) == (ValidatorTier.DEAD, False)

    def test_empty_pot_with_nominations_is_dead(self) -> None:
        """Test that nominations do not revive an empty reward pot."""
        assert classify_intention(0, 500, 100) == (ValidatorTier.DEAD, False)

    def test_self_bonded_dying_is_auto_claimed(self) -> None:
        """Test that a dying validator holding all its nominations claims the pot."""
        assert classify_intention(50, 100, 100) == (ValidatorTier.DYING, True)

    def test_mixed_dying_is_not_auto_claimed(self) -> None:
        """Test that other nominators keep a dying pot unclaimed."""
        assert classify_intention(70, 100, 10) == (ValidatorTier.DYING, False)

    def test_unnominated_dying_is_not_auto_claimed(self) -> None:
        """Test that zero self vote over zero nominations does not claim."""
        assert classify_intention(5, 0, 0) == (ValidatorTier.DYING, False)

    def test_threshold_is_active(self) -> None:
        """Test that a pot of exactly the threshold is active."""
        tier, auto_claim = classify_intention(MINIMUM_ACTIVE_REWARD_POT_BALANCE, 1, 1)

        assert tier is ValidatorTier.ACTIVE
        assert auto_claim is False

    def test_just_below_threshold_is_dying(self) -> None:
        """Test the boundary just below the threshold."""
        tier, _ = classify_intention(MINIMUM_ACTIVE_REWARD_POT_BALANCE - 1, 1, 1)

        assert tier is ValidatorTier.DYING

    def test_custom_threshold(self) -> None:
        """Test that the threshold is configurable."""
        assert classify_intention(10, 0, 0, threshold=10)[0] is ValidatorTier.ACTIVE


class TestClassifyValidators:
    """Tests for classify_validators function."""

    def test_partition_is_complete_and_disjoint(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test that every intention lands in exactly one tier."""
        result = classify(intentions, validator_weights)

        tiers = [result.dead, result.dying, result.active]
        accounts = [i.account for tier in tiers for i in tier]
        assert result.total == len(intentions)
        assert len(set(accounts)) == len(accounts)

    def test_tiers(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test the tier of each sample validator, in snapshot order."""
        result = classify(intentions, validator_weights)

        assert [i.account for i in result.dead] == [encode_address(DEAD)]
        assert [i.account for i in result.dying] == [
            encode_address(key) for key in (SELF_BONDED, MIXED, UNBACKED, NO_BALANCE)
        ]
        assert [i.account for i in result.active] == [
            encode_address(ACTIVE),
            encode_address(UNWEIGHED),
        ]

    def test_auto_claimed(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test that only self-bonded dying validators claim their pots."""
        result = classify(intentions, validator_weights)

        assert result.auto_claimed == {
            encode_address(SELF_BONDED): 50,
            encode_address(NO_BALANCE): 30,
        }
        assert result.auto_claimed_pots == [
            encode_address(SELF_BONDED_POT),
            encode_address(NO_BALANCE_POT),
        ]
        assert result.total_auto_claimed == 80
        assert result.dying_pot_balance == 50 + 70 + 5 + 30

    def test_genesis_validators(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test the genesis records of the active validators."""
        result = classify(intentions, validator_weights)

        active, unweighed = result.validators
        assert active.who == encode_address(ACTIVE)
        assert active.referral_id == "active"
        assert active.self_bonded == 1000
        assert active.total_nomination == 5000
        assert active.total_weight == ACTIVE_WEIGHT
        assert unweighed.who == encode_address(UNWEIGHED)
        assert unweighed.total_weight is None

    def test_missing_weight_is_flagged(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test that an active validator without weight record is flagged."""
        result = classify(intentions, validator_weights)

        assert len(result.flags) == 1
        assert result.flags[0].kind == "missing_validator_weight"
        assert result.flags[0].subject == encode_address(UNWEIGHED)

    def test_missing_weight_strict(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test that strict mode aborts on a missing weight record."""
        with pytest.raises(IntegrityError, match="unweighed"):
            classify(intentions, validator_weights, strict=True)

    def test_reward_pots(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test that every intention's reward pot is listed with its validator."""
        result = classify(intentions, validator_weights)

        assert len(result.reward_pots) == len(intentions)
        assert result.reward_pots[4] == (encode_address(ACTIVE_POT), encode_address(ACTIVE))

    def test_aux_documents(
        self,
        intentions: list[dict[str, Any]],
        validator_weights: list[dict[str, Any]],
    ) -> None:
        """Test the audit documents written by the stage."""
        documents = classify(intentions, validator_weights).aux_documents()

        assert set(documents) == {
            "intentions_dead.json",
            "intentions_dying.json",
            "intentions_active.json",
            "genesis_validators.json",
            "genesis_balances_auto_claimed.json",
        }
        dead = documents["intentions_dead.json"][0]
        assert dead["account"] == encode_address(DEAD)
        assert dead["jackpotAccount"] == intentions[0]["jackpotAccount"]
        assert documents["genesis_validators.json"][1]["total_weight"] is None

    def test_empty_input(self) -> None:
        """Test that no intentions give an empty classification."""
        result = classify([], [])

        assert result.total == 0
        assert result.validators == []
        assert result.auto_claimed == {}
