from __future__ import annotations

from typing import Literal

CardState = Literal["face_down", "face_up", "matched"]

FACE_DOWN: CardState = "face_down"
FACE_UP: CardState = "face_up"
MATCHED: CardState = "matched"

CARD_STATES: tuple[CardState, ...] = (FACE_DOWN, FACE_UP, MATCHED)

EventName = Literal[
    "score_changed",
    "turns_changed",
    "pairs_changed",
    "game_won",
    "game_started",
    "preview_started",
    "preview_ended",
    "card_flipped",
    "match_found",
    "mismatch",
]

Event = dict[str, object]
