from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from .providers import ClickListener
from .types import FACE_DOWN, FACE_UP, MATCHED, CardState

logger = logging.getLogger(__name__)

MAX_SIDE = 8
MIN_CARDS = 4


@dataclass(eq=False)
class Card:
    """A single grid cell.

    Compared by identity: two cards carrying the same pair id are still
    different cards.
    """

    index: int
    pair_id: int
    state: CardState = FACE_DOWN
    interactable: bool = True
    # False when the last face change should be shown without animation.
    animate: bool = False

    def flip_to_front(self, immediate: bool = False) -> None:
        if self.state == MATCHED:
            return
        self.state = FACE_UP
        self.animate = not immediate

    def flip_to_back(self, immediate: bool = False) -> None:
        if self.state == MATCHED:
            return
        self.state = FACE_DOWN
        self.animate = not immediate

    def set_matched(self) -> None:
        self.state = MATCHED
        self.animate = False

    def reset_card(self) -> None:
        self.state = FACE_DOWN
        self.interactable = True
        self.animate = False

    def set_interactable(self, value: bool) -> None:
        self.interactable = value


def is_valid_grid_size(rows: int, columns: int) -> bool:
    if rows < 1 or columns < 1:
        return False
    if rows > MAX_SIDE or columns > MAX_SIDE:
        return False
    total = rows * columns
    return total >= MIN_CARDS and total % 2 == 0


def is_valid_layout(layout: Sequence[int], total_cards: int) -> bool:
    """A layout is valid when it fills the grid and every pair id appears twice."""
    if len(layout) != total_cards:
        return False
    counts = Counter(layout)
    return all(n == 2 for n in counts.values()) and len(counts) == total_cards // 2


class CardGrid:
    """Reference grid provider.

    Pair placement is shuffled with a private `random.Random`, so a seeded
    grid generates the same sequence of layouts every run.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)
        self.rows = 0
        self.columns = 0
        self._cards: list[Card] = []
        self._listeners: list[ClickListener] = []

    # -------- Generation --------
    def is_valid_grid_size(self, rows: int, columns: int) -> bool:
        return is_valid_grid_size(rows, columns)

    def generate_grid(self, rows: int, columns: int, layout: Sequence[int] | None = None) -> None:
        if not is_valid_grid_size(rows, columns):
            raise ValueError(f"Invalid grid size: {rows}x{columns}")
        total = rows * columns

        pair_ids: list[int]
        if layout is not None and is_valid_layout(layout, total):
            pair_ids = list(layout)
        else:
            if layout is not None:
                logger.warning("Ignoring inconsistent layout for %dx%d grid; shuffling", rows, columns)
            pair_ids = [p for p in range(total // 2) for _ in range(2)]
            self._rng.shuffle(pair_ids)

        self.rows = rows
        self.columns = columns
        self._cards = [Card(index=i, pair_id=pid) for i, pid in enumerate(pair_ids)]
        logger.debug("Generated %dx%d grid with %d pairs", rows, columns, self.total_pairs)

    # -------- Queries --------
    def get_all_cards(self) -> list[Card]:
        return list(self._cards)

    @property
    def total_pairs(self) -> int:
        return len(self._cards) // 2

    def is_grid_complete(self) -> bool:
        return bool(self._cards) and all(c.state == MATCHED for c in self._cards)

    def card_at(self, row: int, column: int) -> Card | None:
        if 0 <= row < self.rows and 0 <= column < self.columns:
            return self._cards[row * self.columns + column]
        return None

    def layout(self) -> list[int]:
        return [c.pair_id for c in self._cards]

    # -------- Click notifications --------
    def subscribe_clicks(self, listener: ClickListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe_clicks(self, listener: ClickListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def click(self, index: int) -> bool:
        """Emit a click for the card at `index`. Non-interactable cards stay silent."""
        if index < 0 or index >= len(self._cards):
            return False
        card = self._cards[index]
        if not card.interactable:
            return False
        for listener in list(self._listeners):
            listener(card)
        return True
