"""Agents: one per kind of request the engine makes to the model."""

from .base import BaseAgent, assign_ids
from .chat import HistorianChatAgent, NpcChatAgent
from .chronicler import Chronicler
from .divergence import DivergenceAgent
from .era_briefing import EraBriefer, EraBriefing
from .navigator import SceneNavigator, fallback_navigation
from .simulation import RoleAssigner, fallback_simulation

__all__ = [
    "BaseAgent",
    "assign_ids",
    "Chronicler",
    "DivergenceAgent",
    "EraBriefer",
    "EraBriefing",
    "HistorianChatAgent",
    "NpcChatAgent",
    "RoleAssigner",
    "SceneNavigator",
    "fallback_navigation",
    "fallback_simulation",
]
