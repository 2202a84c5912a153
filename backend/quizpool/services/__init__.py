"""Room services: registry, lifecycle, answers, scoring and settlement.

These modules hold the game rules and are called by the HTTP blueprints,
keeping transport concerns separated from core game mechanics.
"""
