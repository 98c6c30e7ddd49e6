from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from .providers import PersistenceError
from .types import CARD_STATES, CardState


def _require_int(d: Mapping[str, object], key: str) -> int:
    v = d.get(key)
    # bool is an int subclass; a saved `true` is not a count
    if not isinstance(v, int) or isinstance(v, bool):
        raise PersistenceError(f"Expected int for {key}")
    return v


@dataclass(frozen=True)
class CardSaveData:
    card_index: int
    card_id: int
    state: CardState

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "CardSaveData":
        state = d.get("state")
        if state not in CARD_STATES:
            raise PersistenceError(f"Unknown card state: {state!r}")
        return CardSaveData(
            card_index=_require_int(d, "cardIndex"),
            card_id=_require_int(d, "cardId"),
            state=state,  # type: ignore[arg-type]
        )

    def to_dict(self) -> dict[str, object]:
        return {"cardIndex": self.card_index, "cardId": self.card_id, "state": self.state}


@dataclass(frozen=True)
class GameSnapshot:
    score: int
    turns: int
    matched_pairs: int
    grid_rows: int
    grid_columns: int
    card_states: tuple[CardSaveData, ...] = field(default_factory=tuple)

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "GameSnapshot":
        raw_cards = d.get("cardStates", [])
        if not isinstance(raw_cards, list):
            raise PersistenceError("cardStates must be a list")
        cards: list[CardSaveData] = []
        for item in raw_cards:
            if not isinstance(item, dict):
                raise PersistenceError("cardStates entries must be objects")
            cards.append(CardSaveData.from_dict(item))
        return GameSnapshot(
            score=_require_int(d, "score"),
            turns=_require_int(d, "turns"),
            matched_pairs=_require_int(d, "matchedPairs"),
            grid_rows=_require_int(d, "gridRows"),
            grid_columns=_require_int(d, "gridColumns"),
            card_states=tuple(cards),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "turns": self.turns,
            "matchedPairs": self.matched_pairs,
            "gridRows": self.grid_rows,
            "gridColumns": self.grid_columns,
            "cardStates": [c.to_dict() for c in self.card_states],
        }

    def layout(self) -> list[int] | None:
        """Pair ids by card index, or None unless every index is present exactly once."""
        total = self.grid_rows * self.grid_columns
        by_index = {c.card_index: c.card_id for c in self.card_states}
        if len(by_index) != total or len(self.card_states) != total:
            return None
        if sorted(by_index) != list(range(total)):
            return None
        return [by_index[i] for i in range(total)]
