"""Headless rules engine for flipmatch.

IMPORTANT: This package must never import pygame.
"""

from .events import EventBus
from .grid import Card, CardGrid, is_valid_grid_size
from .matching import EngineConfig, MatchingEngine
from .providers import PersistenceError
from .score import ComboScoreTracker, ScoreConfig
from .snapshot import CardSaveData, GameSnapshot
from .timers import FrameScheduler, TimerHandle
from .types import FACE_DOWN, FACE_UP, MATCHED, CardState

__all__ = [
    "FACE_DOWN",
    "FACE_UP",
    "MATCHED",
    "Card",
    "CardGrid",
    "CardSaveData",
    "CardState",
    "ComboScoreTracker",
    "EngineConfig",
    "EventBus",
    "FrameScheduler",
    "GameSnapshot",
    "MatchingEngine",
    "PersistenceError",
    "ScoreConfig",
    "TimerHandle",
    "is_valid_grid_size",
]
