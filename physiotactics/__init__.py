"""
PhysioTactics - Clinician vs. Patient Card Game Engine

A deterministic-given-seed rules engine for a two-role educational card game.
The engine consumes authored card definitions and provides:
- Match state management
- Play validation with remediation suggestions
- Effect resolution, chained effects and counter opportunities
- Turn/phase progression and victory evaluation
- Opponent decision-making for the non-human role
"""

__version__ = "0.1.0"
