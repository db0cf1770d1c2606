"""Test split calculations"""

from decimal import Decimal

import pytest

from app.core.exceptions import ValidationError
from app.schemas.expense import SplitInput, SplitStrategy
from app.services.split_strategies import (EqualSplitStrategy, ExactSplitStrategy,
                                           PercentageSplitStrategy,
                                           SettlementSplitStrategy,
                                           SharesSplitStrategy, calculate_splits,
                                           derive_split_values, get_split_strategy,
                                           validate_splits)


def inputs(*pairs):
    return [SplitInput(member_id=m, value=v) for m, v in pairs]


class TestGetSplitStrategy:
    """Test get_split_strategy factory function"""

    @pytest.mark.parametrize(
        "strategy,expected",
        [
            (SplitStrategy.EQUAL, EqualSplitStrategy),
            (SplitStrategy.EXACT, ExactSplitStrategy),
            (SplitStrategy.PERCENTAGE, PercentageSplitStrategy),
            (SplitStrategy.SHARES, SharesSplitStrategy),
            (SplitStrategy.SETTLEMENT, SettlementSplitStrategy),
        ],
    )
    def test_get_strategy(self, strategy, expected):
        assert isinstance(get_split_strategy(strategy), expected)


class TestEqualSplitStrategy:
    """Test equal split strategy"""

    @pytest.fixture
    def strategy(self):
        return EqualSplitStrategy()

    def test_equal_split_two_participants(self, strategy):
        splits = strategy.calculate_splits(Decimal("100.00"), inputs(("a", 0), ("b", 0)), "a")

        assert [s.amount for s in splits] == [Decimal("50.00"), Decimal("50.00")]

    def test_residual_goes_to_payer(self, strategy):
        """10 split three ways: the payer absorbs the extra cent"""
        splits = strategy.calculate_splits(
            Decimal("10"), inputs(("a", 0), ("b", 0), ("c", 0)), "a"
        )

        assert [s.amount for s in splits] == [Decimal("3.34"), Decimal("3.33"), Decimal("3.33")]
        assert sum(s.amount for s in splits) == Decimal("10")

    def test_residual_goes_to_last_row_without_payer(self, strategy):
        splits = strategy.calculate_splits(
            Decimal("100.00"), inputs(("a", 0), ("b", 0), ("c", 0)), "z"
        )

        assert [s.amount for s in splits] == [
            Decimal("33.33"),
            Decimal("33.33"),
            Decimal("33.34"),
        ]

    def test_raw_values_are_ignored(self, strategy):
        splits = strategy.calculate_splits(Decimal("90"), inputs(("a", 70), ("b", 5)), "a")

        assert [s.amount for s in splits] == [Decimal("45.00"), Decimal("45.00")]


class TestExactSplitStrategy:
    """Test exact split strategy"""

    @pytest.fixture
    def strategy(self):
        return ExactSplitStrategy()

    def test_exact_amounts_are_kept(self, strategy):
        data = inputs(("a", "60"), ("b", "40"))
        strategy.validate(Decimal("100"), data)

        splits = strategy.calculate_splits(Decimal("100"), data, "a")

        assert [s.amount for s in splits] == [Decimal("60.00"), Decimal("40.00")]

    def test_sum_mismatch_rejected(self, strategy):
        with pytest.raises(ValidationError) as exc_info:
            strategy.validate(Decimal("100"), inputs(("a", "60"), ("b", "30")))

        assert "must equal total amount" in exc_info.value.message

    def test_residual_within_tolerance_is_not_corrected(self, strategy):
        data = inputs(("a", "60.01"), ("b", "40"))
        strategy.validate(Decimal("100"), data)

        splits = strategy.calculate_splits(Decimal("100"), data, "a")

        assert sum(s.amount for s in splits) == Decimal("100.01")


class TestPercentageSplitStrategy:
    """Test percentage split strategy"""

    @pytest.fixture
    def strategy(self):
        return PercentageSplitStrategy()

    def test_percentage_split(self, strategy):
        splits = strategy.calculate_splits(Decimal("200"), inputs(("a", 60), ("b", 40)), "a")

        assert [s.amount for s in splits] == [Decimal("120.00"), Decimal("80.00")]

    def test_percentage_residual_goes_to_payer(self, strategy):
        splits = strategy.calculate_splits(
            Decimal("10"), inputs(("a", "33.33"), ("b", "33.33"), ("c", "33.34")), "b"
        )

        assert sum(s.amount for s in splits) == Decimal("10.00")
        assert splits[1].amount == Decimal("3.34")

    def test_percentage_sum_must_be_100(self, strategy):
        with pytest.raises(ValidationError) as exc_info:
            strategy.validate(Decimal("100"), inputs(("a", 50), ("b", 40)))

        assert "100%" in exc_info.value.message

    def test_percentage_above_100_rejected(self, strategy):
        with pytest.raises(ValidationError):
            strategy.validate(Decimal("100"), inputs(("a", 150), ("b", 0)))


class TestSharesSplitStrategy:
    """Test shares split strategy"""

    @pytest.fixture
    def strategy(self):
        return SharesSplitStrategy()

    def test_shares_split(self, strategy):
        splits = strategy.calculate_splits(Decimal("150"), inputs(("a", 1), ("b", 2)), "b")

        assert [s.amount for s in splits] == [Decimal("50.00"), Decimal("100.00")]

    def test_shares_residual_goes_to_payer(self, strategy):
        splits = strategy.calculate_splits(
            Decimal("100"), inputs(("a", 1), ("b", 1), ("c", 1)), "b"
        )

        assert [s.amount for s in splits] == [
            Decimal("33.33"),
            Decimal("33.34"),
            Decimal("33.33"),
        ]

    def test_zero_share_total_gives_zero_amounts(self, strategy):
        splits = strategy.calculate_splits(Decimal("100"), inputs(("a", 0), ("b", 0)), "a")

        assert all(s.amount == Decimal("0") for s in splits)

    def test_zero_share_total_rejected_by_validation(self, strategy):
        with pytest.raises(ValidationError):
            strategy.validate(Decimal("100"), inputs(("a", 0), ("b", 0)))


class TestSettlementSplitStrategy:
    """Test settlement split strategy"""

    def test_single_recipient(self):
        validate_splits(Decimal("25"), SplitStrategy.SETTLEMENT, inputs(("b", 25)), "a")

        splits = calculate_splits(Decimal("25"), SplitStrategy.SETTLEMENT, inputs(("b", 25)), "a")

        assert len(splits) == 1
        assert splits[0].member_id == "b"
        assert splits[0].amount == Decimal("25.00")
        assert splits[0].accepted is False

    def test_two_recipients_rejected(self):
        with pytest.raises(ValidationError):
            validate_splits(
                Decimal("25"), SplitStrategy.SETTLEMENT, inputs(("b", 10), ("c", 15)), "a"
            )

    def test_amount_must_match(self):
        with pytest.raises(ValidationError):
            validate_splits(Decimal("25"), SplitStrategy.SETTLEMENT, inputs(("b", 20)), "a")

    def test_settling_with_yourself_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_splits(Decimal("25"), SplitStrategy.SETTLEMENT, inputs(("a", 25)), "a")

        assert "themselves" in exc_info.value.message


class TestCommonValidation:
    """Checks shared by every strategy"""

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_total_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            validate_splits(amount, SplitStrategy.EQUAL, inputs(("a", 0)), "a")

        assert "greater than 0" in exc_info.value.message

    def test_no_participants_rejected(self):
        with pytest.raises(ValidationError):
            validate_splits(Decimal("10"), SplitStrategy.EQUAL, [], "a")

    def test_duplicate_participant_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_splits(Decimal("10"), SplitStrategy.EQUAL, inputs(("a", 0), ("a", 0)), "a")

        assert "only once" in exc_info.value.message

    def test_negative_value_rejected(self):
        with pytest.raises(ValidationError):
            validate_splits(
                Decimal("10"), SplitStrategy.SHARES, inputs(("a", 2), ("b", -1)), "a"
            )


class TestCalculateSplits:
    """Test the calculator entry point"""

    @pytest.mark.parametrize(
        "strategy,data",
        [
            (SplitStrategy.EQUAL, [("a", 0), ("b", 0), ("c", 0)]),
            (SplitStrategy.PERCENTAGE, [("a", "12.5"), ("b", "30"), ("c", "57.5")]),
            (SplitStrategy.SHARES, [("a", 3), ("b", 1), ("c", 7)]),
        ],
    )
    def test_split_sum_equals_total(self, strategy, data):
        amount = Decimal("1234.57")
        validate_splits(amount, strategy, inputs(*data), "b")

        splits = calculate_splits(amount, strategy, inputs(*data), "b")

        assert abs(sum(s.amount for s in splits) - amount) <= Decimal("0.01")

    def test_tiny_share_total_never_goes_negative(self):
        data = [(m, 1) for m in "abcde"]

        splits = calculate_splits(Decimal("0.03"), SplitStrategy.SHARES, inputs(*data), "a")

        assert [s.amount for s in splits] == [
            Decimal("0.01"),
            Decimal("0.00"),
            Decimal("0.00"),
            Decimal("0.01"),
            Decimal("0.01"),
        ]

    def test_tiny_equal_total_among_many(self):
        data = [(f"m{i}", 0) for i in range(15)]

        splits = calculate_splits(Decimal("0.10"), SplitStrategy.EQUAL, inputs(*data), "m0")

        assert all(s.amount >= Decimal("0") for s in splits)
        assert sum(s.amount for s in splits) == Decimal("0.10")
        assert splits[0].amount == Decimal("0.01")
        assert len([s for s in splits if s.amount == Decimal("0.01")]) == 10

    def test_several_leftover_cents_spread_one_at_a_time(self):
        splits = calculate_splits(
            Decimal("0.05"), SplitStrategy.EQUAL, inputs(("a", 0), ("b", 0), ("c", 0)), "b"
        )

        assert [s.amount for s in splits] == [
            Decimal("0.01"),
            Decimal("0.02"),
            Decimal("0.02"),
        ]

    def test_only_payer_starts_accepted(self):
        splits = calculate_splits(
            Decimal("30"), SplitStrategy.EQUAL, inputs(("a", 0), ("b", 0), ("c", 0)), "b"
        )

        assert [s.accepted for s in splits] == [False, True, False]
        assert splits[1].accepted_at is not None
        assert splits[0].accepted_at is None


class TestDeriveSplitValues:
    """Test switching the display strategy of computed splits"""

    def test_equal_percentage_exact_round_trip(self):
        amount = Decimal("10")
        equal = calculate_splits(
            amount, SplitStrategy.EQUAL, inputs(("a", 0), ("b", 0), ("c", 0)), "a"
        )

        percentages = derive_split_values(amount, equal, SplitStrategy.PERCENTAGE)
        assert [p.value for p in percentages] == [
            Decimal("33.40"),
            Decimal("33.30"),
            Decimal("33.30"),
        ]
        by_percentage = calculate_splits(amount, SplitStrategy.PERCENTAGE, percentages, "a")

        exact = derive_split_values(amount, by_percentage, SplitStrategy.EXACT)
        by_exact = calculate_splits(amount, SplitStrategy.EXACT, exact, "a")

        for original, final in zip(equal, by_exact):
            assert abs(original.amount - final.amount) <= Decimal("0.1")

    def test_equal_values_are_zero(self):
        splits = calculate_splits(
            Decimal("10"), SplitStrategy.EXACT, inputs(("a", 4), ("b", 6)), "a"
        )

        derived = derive_split_values(Decimal("10"), splits, SplitStrategy.EQUAL)

        assert all(d.value == Decimal("0") for d in derived)
