"""
Round, bye and slot arithmetic for single-elimination brackets.

Round numbers count backward from the final: the final is round 1, its two
feeders are round 2, and the first round played is round ``total_rounds``.
"""

from typing import Tuple

PLAYER1_SLOT = 1
PLAYER2_SLOT = 2


def total_rounds(participant_count: int) -> int:
    """ceil(log2(n)) for n >= 2"""
    if participant_count < 2:
        raise ValueError(f"total_rounds: need at least 2 participants, got {participant_count}")
    return (participant_count - 1).bit_length()


def bracket_size(participant_count: int) -> int:
    """Next power of two at or above the participant count."""
    return 1 << total_rounds(participant_count)


def bye_count(participant_count: int) -> int:
    return bracket_size(participant_count) - participant_count


def matches_in_round(round_number: int) -> int:
    if round_number < 1:
        raise ValueError(f"round_number must be >= 1, got {round_number}")
    return 1 << (round_number - 1)


def total_matches(participant_count: int) -> int:
    """Sum of 2^(r-1) over every round"""
    return bracket_size(participant_count) - 1


def next_slot(round_number: int, match_order: int) -> Tuple[int, int, int]:
    """
    Where the winner of (round_number, match_order) plays next.

    Returns (next_round_number, next_match_order, slot) where slot is
    PLAYER1_SLOT for odd match_order and PLAYER2_SLOT for even.
    """
    if round_number <= 1:
        raise ValueError("The final has no next match")
    if match_order < 1 or match_order > matches_in_round(round_number):
        raise ValueError(f"match_order {match_order} out of range for round {round_number}")
    slot = PLAYER1_SLOT if match_order % 2 == 1 else PLAYER2_SLOT
    return round_number - 1, (match_order + 1) // 2, slot


def round_name(round_number: int) -> str:
    if round_number == 1:
        return "Finals"
    if round_number == 2:
        return "Semi-Finals"
    if round_number == 3:
        return "Quarter-Finals"
    return f"Round of {2 ** round_number}"
