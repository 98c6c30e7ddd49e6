"""Collaborator interfaces consumed by the matching engine.

The engine only ever talks to these protocols; `grid.CardGrid`,
`score.ComboScoreTracker`, `timers.FrameScheduler` and
`flipmatch.services.persistence.JsonSaveStore` are the bundled
implementations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, Sequence

from .types import CardState

if TYPE_CHECKING:
    from .snapshot import GameSnapshot


class PersistenceError(RuntimeError):
    pass


class CardHandle(Protocol):
    @property
    def pair_id(self) -> int: ...

    @property
    def state(self) -> CardState: ...

    @property
    def interactable(self) -> bool: ...

    def flip_to_front(self, immediate: bool = False) -> None: ...

    def flip_to_back(self, immediate: bool = False) -> None: ...

    def set_matched(self) -> None: ...

    def reset_card(self) -> None: ...

    def set_interactable(self, value: bool) -> None: ...


ClickListener = Callable[["CardHandle | None"], None]


class GridProvider(Protocol):
    def generate_grid(self, rows: int, columns: int, layout: Sequence[int] | None = None) -> None: ...

    def is_valid_grid_size(self, rows: int, columns: int) -> bool: ...

    def get_all_cards(self) -> Sequence[CardHandle]: ...

    @property
    def total_pairs(self) -> int: ...

    def is_grid_complete(self) -> bool: ...

    def subscribe_clicks(self, listener: ClickListener) -> None: ...

    def unsubscribe_clicks(self, listener: ClickListener) -> None: ...


class ScoreTracker(Protocol):
    def register_match(self) -> None: ...

    def register_mismatch(self) -> None: ...

    def reset_score(self) -> None: ...

    def restore_score(self, total: int) -> None: ...

    @property
    def total_score(self) -> int: ...


class PersistenceProvider(Protocol):
    """Durable store for a single in-progress game.

    Implementations raise `PersistenceError` when stored data cannot be
    written, read or understood.
    """

    def has_saved_game(self) -> bool: ...

    def save_game(self, snapshot: "GameSnapshot") -> None: ...

    def load_game(self) -> "GameSnapshot | None": ...

    def clear_saved_game(self) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...
