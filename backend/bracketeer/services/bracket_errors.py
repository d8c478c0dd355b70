"""
Typed failures raised by the bracket generator and the advancement engine.

None of these are retried: they are either caller input errors or bracket
integrity violations.
"""


class BracketError(Exception):
    """Base exception for bracket errors"""
    pass


class InsufficientParticipants(BracketError):
    """Fewer than two entrants; generation refused"""

    def __init__(self, count: int, required: int = 2):
        self.count = count
        self.required = required
        super().__init__(f"At least {required} participants are required to generate a bracket, got {count}")


class DuplicateParticipant(BracketError):
    """The same participant id was supplied more than once"""

    def __init__(self, participant_id: str):
        self.participant_id = participant_id
        super().__init__(f"Participant {participant_id!r} appears more than once")


class MatchNotFound(BracketError):
    """Unknown match id"""

    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match {match_id} not found")


class InvalidWinner(BracketError):
    """Recorded winner is not one of the match's two players"""

    def __init__(self, match_id: int, winner_id: str):
        self.match_id = match_id
        self.winner_id = winner_id
        super().__init__(f"{winner_id!r} is not a player in match {match_id}")


class MatchNotReady(BracketError):
    """Match is still missing a player"""

    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match {match_id} does not have both players yet")


class AdvancementConflict(BracketError):
    """A destination slot already holds a different participant"""
    pass


class MatchAlreadyDecided(AdvancementConflict):
    """The match already has a different recorded winner"""

    def __init__(self, match_id: int, existing_winner_id: str):
        self.match_id = match_id
        self.existing_winner_id = existing_winner_id
        super().__init__(f"Match {match_id} already has winner {existing_winner_id!r}")
