"""
Movement - Campaign Simulation Engine

A deterministic, turn-based engine for running a grassroots movement.
Given a state and an intent it produces the next state. It provides:
- State management with clamped, serializable campaign state
- An action catalogue with adjusted costs and eligibility
- A modifier pipeline (advisors, risk, streaks, criticals)
- Faction sentiment, event chains and a three-reel spin mechanic
- Victory and defeat evaluation
"""

__version__ = "0.1.0"
