import pytest

from core.errors import InvariantViolation
from core.tiers import (
    GROUP_TIERS,
    HABIT_TIERS,
    counter_to_next_tier,
    next_tier,
    resolve_tier,
    validate_tier_table,
)


class TestResolveTier:

    @pytest.mark.parametrize("streak, expected", [
        (0, "beginner"),
        (6, "beginner"),
        (7, "novice"),
        (13, "novice"),
        (14, "adept"),
        (59, "expert"),
        (99, "master"),
        (100, "legendary"),
        (5000, "legendary"),
    ])
    def test_habit_boundaries(self, streak, expected):
        tier, _ = resolve_tier(streak, HABIT_TIERS)
        assert tier["key"] == expected

    def test_group_boundaries_at_10_and_20(self):
        assert resolve_tier(9, GROUP_TIERS)[0]["tier"] == 1
        assert resolve_tier(10, GROUP_TIERS)[0]["tier"] == 2
        assert resolve_tier(19, GROUP_TIERS)[0]["tier"] == 2
        assert resolve_tier(20, GROUP_TIERS)[0]["tier"] == 3

    def test_progress_inside_tier(self):
        # Novice: 7..13 → 7 значений
        _, progress = resolve_tier(10, HABIT_TIERS)
        assert progress == pytest.approx(3 / 7 * 100)

        _, progress = resolve_tier(7, HABIT_TIERS)
        assert progress == 0

    def test_progress_never_reaches_100_below_top(self):
        _, progress = resolve_tier(13, HABIT_TIERS)
        assert 0 <= progress < 100

    def test_top_tier_is_always_full(self):
        assert resolve_tier(100, HABIT_TIERS)[1] == 100
        assert resolve_tier(100000, HABIT_TIERS)[1] == 100

    def test_exactly_one_tier_and_monotonic(self):
        for table in (HABIT_TIERS, GROUP_TIERS):
            previous = 0
            for counter in range(0, 400):
                matches = [
                    t for t in table
                    if counter >= t["min"] and (t["max"] is None or counter <= t["max"])
                ]
                assert len(matches) == 1

                tier, progress = resolve_tier(counter, table)
                assert tier["tier"] >= previous
                assert 0 <= progress <= 100
                previous = tier["tier"]

    @pytest.mark.parametrize("bad", [-1, -100, 1.5, None, "7"])
    def test_invalid_counter_fails_loudly(self, bad):
        with pytest.raises(InvariantViolation):
            resolve_tier(bad, HABIT_TIERS)


class TestTierHelpers:

    def test_next_tier(self):
        beginner = HABIT_TIERS[0]
        assert next_tier(beginner, HABIT_TIERS)["key"] == "novice"
        assert next_tier(HABIT_TIERS[-1], HABIT_TIERS) is None

    def test_counter_to_next_tier(self):
        assert counter_to_next_tier(0, HABIT_TIERS) == 7
        assert counter_to_next_tier(12, HABIT_TIERS) == 2
        assert counter_to_next_tier(8, GROUP_TIERS) == 2
        assert counter_to_next_tier(150, HABIT_TIERS) == 0


class TestValidateTierTable:

    def _table(self, *bounds):
        return [
            {"tier": i + 1, "key": f"t{i}", "title": f"T{i}", "emoji": "", "min": lo, "max": hi, "multiplier": 1.0}
            for i, (lo, hi) in enumerate(bounds)
        ]

    def test_valid_table(self):
        table = self._table((0, 4), (5, 9), (10, None))
        assert validate_tier_table(table) is table

    def test_gap(self):
        with pytest.raises(InvariantViolation):
            validate_tier_table(self._table((0, 4), (6, None)))

    def test_overlap(self):
        with pytest.raises(InvariantViolation):
            validate_tier_table(self._table((0, 5), (5, None)))

    def test_open_bound_not_last(self):
        with pytest.raises(InvariantViolation):
            validate_tier_table(self._table((0, None), (5, None)))

    def test_closed_top(self):
        with pytest.raises(InvariantViolation):
            validate_tier_table(self._table((0, 4), (5, 9)))

    def test_not_starting_at_zero(self):
        with pytest.raises(InvariantViolation):
            validate_tier_table(self._table((1, 4), (5, None)))

    def test_empty(self):
        with pytest.raises(InvariantViolation):
            validate_tier_table([])
