"""
Services Layer

Bracket business logic that:
- Accepts domain inputs (event/match IDs, participants, sessions)
- Returns domain outputs (models, plans, summary dicts)
- Does NOT depend on HTTP request/response objects
- Raises typed errors from bracket_errors; routes decide how to present them
"""
