"""
Seeding policy: the order in which participants are laid into bracket slots.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class Participant:
    participant_id: str
    registered_at: Optional[datetime] = None
    seed: Optional[int] = None  # 1-based rank (1=strongest)


def seed_sort_key(participant: Participant):
    return (
        # seed: nulls last, ascending
        (participant.seed is None, participant.seed if participant.seed is not None else 0),
        # registered_at: nulls last, ascending
        (
            participant.registered_at is None,
            participant.registered_at if participant.registered_at is not None else datetime.max,
        ),
        # participant_id: ascending
        participant.participant_id,
    )


def seed_participants(
    participants: Sequence[Participant],
    seed_randomly: bool,
    rng: Optional[random.Random] = None,
) -> List[Participant]:
    """
    Order participants for slot placement.

    Random seeding is a uniform shuffle drawn from ``rng`` (a fresh
    ``random.Random`` when omitted). Otherwise the order is deterministic:
    1. seed ascending (non-null first)
    2. registered_at ascending (non-null first)
    3. participant_id ascending

    In a mixed field every seeded participant goes ahead of every unseeded one;
    registration time only orders participants within each group.
    """
    if seed_randomly:
        shuffled = list(participants)
        (rng or random.Random()).shuffle(shuffled)
        return shuffled
    return sorted(participants, key=seed_sort_key)
