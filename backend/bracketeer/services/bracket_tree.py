"""
Bracket Generator: builds the complete single-elimination match tree in memory.

The plan is an arena of nodes keyed by (round_number, match_order), so finding
the match a winner feeds into is an index computation. Byes are resolved here,
before anything touches the database:

1. Seed participants (seeding.py)
2. Lay them into bracket_size slots, pairing every bye against a real participant
3. Build the first round (round_number = total_rounds); bye pairs are completed
4. Build empty placeholder matches for every later round
5. Seat each bye winner in the next round with the same parity rule the
   advancement engine uses for recorded results
"""

import random
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from bracketeer.models.match import MatchState, MatchStatus, derive_match_state
from bracketeer.services import bracket_math
from bracketeer.services.bracket_errors import (
    AdvancementConflict,
    DuplicateParticipant,
    InsufficientParticipants,
)
from bracketeer.services.seeding import Participant, seed_participants


@dataclass
class BracketNode:
    round_number: int
    match_order: int
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None
    winner_id: Optional[str] = None
    status: str = MatchStatus.pending.value

    @property
    def key(self) -> Tuple[int, int]:
        return (self.round_number, self.match_order)

    @property
    def state(self) -> MatchState:
        return derive_match_state(self.player1_id, self.player2_id, self.winner_id, self.status)

    def slot(self, slot: int) -> Optional[str]:
        return self.player1_id if slot == bracket_math.PLAYER1_SLOT else self.player2_id

    def seat(self, slot: int, participant_id: str) -> None:
        if slot == bracket_math.PLAYER1_SLOT:
            self.player1_id = participant_id
        else:
            self.player2_id = participant_id


@dataclass
class BracketPlan:
    participant_count: int
    total_rounds: int
    bracket_size: int
    bye_count: int
    seeded: List[Participant] = field(default_factory=list)
    nodes: Dict[Tuple[int, int], BracketNode] = field(default_factory=dict)

    def node(self, round_number: int, match_order: int) -> BracketNode:
        return self.nodes[(round_number, match_order)]

    def round(self, round_number: int) -> List[BracketNode]:
        return [
            self.nodes[(round_number, order)]
            for order in range(1, bracket_math.matches_in_round(round_number) + 1)
        ]

    def all_nodes(self) -> Iterator[BracketNode]:
        """First round played first, left to right within each round."""
        for round_number in range(self.total_rounds, 0, -1):
            yield from self.round(round_number)

    def bye_nodes(self) -> List[BracketNode]:
        return [n for n in self.round(self.total_rounds) if n.state == MatchState.bye]


def build_slots(seeded_ids: Sequence[str]) -> List[Optional[str]]:
    """
    Lay seeded participants into bracket_size slots; None marks a bye.

    The strongest seeds fill the leading pairs head to head. Each of the
    weakest bye_count participants is then paired with a bye, so byes sit on
    the highest-indexed pairs and two byes never meet.
    """
    n = len(seeded_ids)
    size = bracket_math.bracket_size(n)
    byes = size - n
    full_pairs = size // 2 - byes

    slots: List[Optional[str]] = list(seeded_ids[: 2 * full_pairs])
    for participant_id in seeded_ids[2 * full_pairs:]:
        slots.extend([participant_id, None])
    return slots


def seat_winner(plan: BracketPlan, node: BracketNode) -> Optional[BracketNode]:
    """
    Seat node.winner_id in the next round. Returns the destination node, or
    None when node is the final.

    Never overwrites a seated slot holding someone else.
    """
    if node.winner_id is None or node.round_number <= 1:
        return None
    next_round, next_order, slot = bracket_math.next_slot(node.round_number, node.match_order)
    destination = plan.node(next_round, next_order)
    current = destination.slot(slot)
    if current is not None and current != node.winner_id:
        raise AdvancementConflict(
            f"Round {next_round} match {next_order} slot {slot} already holds {current!r}; "
            f"cannot seat {node.winner_id!r}"
        )
    destination.seat(slot, node.winner_id)
    return destination


def plan_bracket(
    participants: Sequence[Participant],
    seed_randomly: bool,
    rng: Optional[random.Random] = None,
) -> BracketPlan:
    """Build every match of the bracket, with bye winners already advanced."""
    if len(participants) < 2:
        raise InsufficientParticipants(len(participants))

    seen = set()
    for participant in participants:
        if participant.participant_id in seen:
            raise DuplicateParticipant(participant.participant_id)
        seen.add(participant.participant_id)

    n = len(participants)
    plan = BracketPlan(
        participant_count=n,
        total_rounds=bracket_math.total_rounds(n),
        bracket_size=bracket_math.bracket_size(n),
        bye_count=bracket_math.bye_count(n),
    )
    plan.seeded = seed_participants(participants, seed_randomly, rng)
    slots = build_slots([p.participant_id for p in plan.seeded])

    first_round = plan.total_rounds
    for i in range(plan.bracket_size // 2):
        node = BracketNode(
            round_number=first_round,
            match_order=i + 1,
            player1_id=slots[2 * i],
            player2_id=slots[2 * i + 1],
        )
        if node.player2_id is None:
            node.winner_id = node.player1_id
            node.status = MatchStatus.completed.value
        plan.nodes[node.key] = node

    for round_number in range(first_round - 1, 0, -1):
        for order in range(1, bracket_math.matches_in_round(round_number) + 1):
            plan.nodes[(round_number, order)] = BracketNode(round_number=round_number, match_order=order)

    for node in plan.bye_nodes():
        seat_winner(plan, node)

    return plan
