"""
Tests for round, bye and slot arithmetic.
"""
import pytest

from bracketeer.services.bracket_math import (
    PLAYER1_SLOT,
    PLAYER2_SLOT,
    bracket_size,
    bye_count,
    matches_in_round,
    next_slot,
    round_name,
    total_matches,
    total_rounds,
)


class TestRoundCounts:
    @pytest.mark.parametrize(
        "n,rounds,size,byes",
        [
            (2, 1, 2, 0),
            (3, 2, 4, 1),
            (4, 2, 4, 0),
            (5, 3, 8, 3),
            (7, 3, 8, 1),
            (8, 3, 8, 0),
            (9, 4, 16, 7),
            (16, 4, 16, 0),
            (17, 5, 32, 15),
            (64, 6, 64, 0),
        ],
    )
    def test_rounds_size_and_byes(self, n, rounds, size, byes):
        assert total_rounds(n) == rounds
        assert bracket_size(n) == size
        assert bye_count(n) == byes

    @pytest.mark.parametrize("n", [-1, 0, 1])
    def test_fewer_than_two_rejected(self, n):
        with pytest.raises(ValueError):
            total_rounds(n)

    def test_matches_in_round(self):
        assert matches_in_round(1) == 1
        assert matches_in_round(2) == 2
        assert matches_in_round(3) == 4
        assert matches_in_round(6) == 32

    def test_matches_in_round_rejects_zero(self):
        with pytest.raises(ValueError):
            matches_in_round(0)

    @pytest.mark.parametrize("n", range(2, 40))
    def test_total_matches_sums_every_round(self, n):
        expected = sum(matches_in_round(r) for r in range(1, total_rounds(n) + 1))
        assert total_matches(n) == expected == bracket_size(n) - 1


class TestNextSlot:
    def test_odd_order_takes_player1(self):
        assert next_slot(3, 1) == (2, 1, PLAYER1_SLOT)
        assert next_slot(3, 3) == (2, 2, PLAYER1_SLOT)

    def test_even_order_takes_player2(self):
        assert next_slot(3, 2) == (2, 1, PLAYER2_SLOT)
        assert next_slot(3, 4) == (2, 2, PLAYER2_SLOT)

    def test_semi_finals_feed_final(self):
        assert next_slot(2, 1) == (1, 1, PLAYER1_SLOT)
        assert next_slot(2, 2) == (1, 1, PLAYER2_SLOT)

    def test_final_has_no_next_match(self):
        with pytest.raises(ValueError):
            next_slot(1, 1)

    @pytest.mark.parametrize("order", [0, 5])
    def test_order_out_of_range(self, order):
        with pytest.raises(ValueError):
            next_slot(3, order)

    def test_every_slot_of_a_round_fed_exactly_once(self):
        for round_number in range(2, 7):
            targets = [next_slot(round_number, o) for o in range(1, matches_in_round(round_number) + 1)]
            assert len(set(targets)) == len(targets)
            assert {(r, o) for r, o, _ in targets} == {
                (round_number - 1, o) for o in range(1, matches_in_round(round_number - 1) + 1)
            }


def test_round_names():
    assert round_name(1) == "Finals"
    assert round_name(2) == "Semi-Finals"
    assert round_name(3) == "Quarter-Finals"
    assert round_name(4) == "Round of 16"
    assert round_name(5) == "Round of 32"
