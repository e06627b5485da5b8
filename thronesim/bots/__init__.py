"""
Bots module - Agents that answer pending decisions.

Provides:
- Agent: Interface for decision-making, one method per decision type
- RandomAgent: Seeded random answers
- PassiveAgent: Minimal legal answers
"""

from .policy import Agent, RandomAgent, PassiveAgent

__all__ = [
    "Agent",
    "RandomAgent",
    "PassiveAgent",
]
