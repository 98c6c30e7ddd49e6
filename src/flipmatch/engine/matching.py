from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from .events import EventBus
from .providers import (
    Cancellable,
    CardHandle,
    GridProvider,
    PersistenceError,
    PersistenceProvider,
    Scheduler,
    ScoreTracker,
)
from .snapshot import CardSaveData, GameSnapshot
from .types import FACE_DOWN, FACE_UP, MATCHED

logger = logging.getLogger(__name__)

MIN_PREVIEW_DURATION = 0.5


@dataclass(frozen=True)
class EngineConfig:
    mismatch_delay: float = 1.5
    max_flipped_cards: int = 2
    allow_continuous_flipping: bool = True
    enable_preview: bool = True
    preview_duration: float = 2.0
    default_rows: int = 3
    default_columns: int = 4

    def __post_init__(self) -> None:
        # Evaluation compares pair ids of exactly two cards.
        if self.max_flipped_cards != 2:
            raise ValueError("max_flipped_cards must be 2 (pairwise matching only)")
        if self.mismatch_delay < 0:
            raise ValueError("mismatch_delay must be >= 0")


class MatchingEngine:
    """Turn-taking rules for one memory game session.

    All mutation happens on the caller's thread: player input arrives via
    `on_card_clicked` (normally subscribed to the grid's click
    notifications) and timed actions run from the scheduler's tick. Two
    delayed actions exist, mismatch recovery and the preview timer; each
    kind has at most one outstanding handle, and starting or restarting a
    game cancels both.
    """

    def __init__(
        self,
        grid: GridProvider | None,
        scheduler: Scheduler,
        *,
        score_tracker: ScoreTracker | None = None,
        persistence: PersistenceProvider | None = None,
        config: EngineConfig | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.events = events or EventBus()
        self._grid = grid
        self._scheduler = scheduler
        self._score_tracker = score_tracker
        self._persistence = persistence

        self._enable_preview = self.config.enable_preview
        self._preview_duration = max(MIN_PREVIEW_DURATION, self.config.preview_duration)
        self._rows = self.config.default_rows
        self._columns = self.config.default_columns

        self._flipped: list[CardHandle] = []
        self._pending: deque[CardHandle] = deque()
        self._evaluating = False
        self._score = 0
        self._turns = 0
        self._matched_pairs = 0
        self._active = False
        self._preview = False

        self._mismatch_timer: Cancellable | None = None
        self._preview_timer: Cancellable | None = None
        self._subscribed = False

    # -------- Queries --------
    @property
    def score(self) -> int:
        return self._score

    @property
    def turns(self) -> int:
        return self._turns

    @property
    def matched_pairs(self) -> int:
        return self._matched_pairs

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_preview_phase(self) -> bool:
        return self._preview

    @property
    def is_evaluating(self) -> bool:
        return self._evaluating

    @property
    def can_save(self) -> bool:
        """True when a save would hold no face-up, unresolved cards."""
        return self._persistence is not None and self._active and not self._evaluating and not self._flipped

    @property
    def total_pairs(self) -> int:
        return self._grid.total_pairs if self._grid is not None else 0

    @property
    def flipped_cards(self) -> tuple[CardHandle, ...]:
        return tuple(self._flipped)

    @property
    def pending_clicks(self) -> int:
        return len(self._pending)

    @property
    def grid_size(self) -> tuple[int, int]:
        return self._rows, self._columns

    def grid_size_text(self) -> str:
        return f"{self._rows}x{self._columns}"

    @property
    def preview_enabled(self) -> bool:
        return self._enable_preview

    @property
    def preview_duration(self) -> float:
        return self._preview_duration

    # -------- Lifecycle --------
    def initialize(self) -> bool:
        """Hook up grid clicks, then resume the saved game or start a new one."""
        if self._grid is None:
            logger.error("No grid provider configured; cannot initialize")
            return False
        if not self._subscribed:
            self._grid.subscribe_clicks(self.on_card_clicked)
            self._subscribed = True

        if self._has_saved_game() and self.load_game():
            return True
        return self.start_new_game(self._rows, self._columns)

    def shutdown(self) -> None:
        self._cancel_timers()
        if self._grid is not None and self._subscribed:
            self._grid.unsubscribe_clicks(self.on_card_clicked)
        self._subscribed = False
        self._active = False
        self._preview = False

    def start_new_game(self, rows: int, columns: int) -> bool:
        if self._grid is None:
            logger.error("No grid provider configured; cannot start a game")
            return False
        if not self._grid.is_valid_grid_size(rows, columns):
            logger.error("Invalid grid size: %dx%d", rows, columns)
            return False

        logger.info("Starting new game with %dx%d grid", rows, columns)
        self._reset_session()
        self._rows = rows
        self._columns = columns
        self._grid.generate_grid(rows, columns)

        self.events.emit("game_started")
        self._publish_counters()

        if self._enable_preview:
            self._start_preview()
        else:
            self._active = True
        logger.info("New game started: %d pairs to match", self._grid.total_pairs)
        return True

    def restart(self) -> bool:
        logger.info("Restarting game")
        return self.start_new_game(self._rows, self._columns)

    def set_grid_size(self, rows: int, columns: int) -> None:
        """Dimensions used by the next `restart` or `initialize`."""
        self._rows = rows
        self._columns = columns

    def set_preview(self, enabled: bool, duration: float) -> None:
        self._enable_preview = enabled
        self._preview_duration = max(MIN_PREVIEW_DURATION, duration)

    # -------- Input --------
    def on_card_clicked(self, card: CardHandle | None) -> None:
        if not self._active or card is None or self._preview:
            return
        if self.config.allow_continuous_flipping:
            self._pending.append(card)
            self._drain_pending()
        elif not self._evaluating:
            self._flip(card)

    def _drain_pending(self) -> None:
        while self._pending and len(self._flipped) < self.config.max_flipped_cards:
            card = self._pending.popleft()
            if self._can_flip(card):
                self._flip(card)

    def _can_flip(self, card: CardHandle) -> bool:
        return card.state == FACE_DOWN and not any(c is card for c in self._flipped)

    def _flip(self, card: CardHandle) -> None:
        if not self._can_flip(card):
            return
        card.flip_to_front()
        self._flipped.append(card)
        self.events.emit("card_flipped", card)
        logger.debug("Card flipped: pair %d, %d face up", card.pair_id, len(self._flipped))
        if len(self._flipped) >= self.config.max_flipped_cards:
            self._evaluate()

    # -------- Evaluation --------
    def _evaluate(self) -> None:
        if len(self._flipped) < 2:
            return
        self._turns += 1
        self.events.emit("turns_changed", self._turns)

        first, second = self._flipped[0], self._flipped[1]
        if first.pair_id == second.pair_id:
            self._handle_match(first, second)
        else:
            self._handle_mismatch(first, second)

    def _handle_match(self, first: CardHandle, second: CardHandle) -> None:
        logger.debug("Match found: pair %d", first.pair_id)
        for card in self._flipped:
            card.set_matched()

        if self._score_tracker is not None:
            self._score_tracker.register_match()
            self._score = self._score_tracker.total_score
        else:
            self._score += 1
        self._matched_pairs += 1
        self._flipped.clear()

        self.events.emit("match_found", first, second)
        self.events.emit("score_changed", self._score)
        self.events.emit("pairs_changed", self._matched_pairs, self.total_pairs)

        self._check_win()
        if self._active and self.config.allow_continuous_flipping:
            self._drain_pending()

    def _handle_mismatch(self, first: CardHandle, second: CardHandle) -> None:
        logger.debug("Mismatch: pairs %d and %d", first.pair_id, second.pair_id)
        self.events.emit("mismatch", first, second)
        if self._score_tracker is not None:
            self._score_tracker.register_mismatch()

        if self._mismatch_timer is not None:
            self._mismatch_timer.cancel()
        self._evaluating = True
        revealed = list(self._flipped)
        self._mismatch_timer = self._scheduler.schedule(
            self.config.mismatch_delay, lambda: self._recover_mismatch(revealed)
        )

    def _recover_mismatch(self, revealed: list[CardHandle]) -> None:
        self._mismatch_timer = None
        self._flipped.clear()
        for card in revealed:
            if card.state == FACE_UP:
                card.flip_to_back()
        self._evaluating = False
        if self.config.allow_continuous_flipping:
            self._drain_pending()

    def _check_win(self) -> None:
        assert self._grid is not None
        if self._grid.is_grid_complete():
            logger.info("Game won in %d turns, score %d", self._turns, self._score)
            self._active = False
            self._pending.clear()
            self.events.emit("game_won")
            self._clear_saved_game()
        else:
            self.save_game()

    # -------- Preview --------
    def _start_preview(self) -> None:
        assert self._grid is not None
        logger.debug("Preview started for %.2fs", self._preview_duration)
        self._preview = True
        self._active = False
        for card in self._grid.get_all_cards():
            card.flip_to_front(immediate=True)
            card.set_interactable(False)
        self.events.emit("preview_started")

        if self._preview_timer is not None:
            self._preview_timer.cancel()
        self._preview_timer = self._scheduler.schedule(self._preview_duration, self._end_preview)

    def _end_preview(self) -> None:
        assert self._grid is not None
        self._preview_timer = None
        for card in self._grid.get_all_cards():
            card.flip_to_back(immediate=True)
            card.set_interactable(True)
        self._preview = False
        self._active = True
        self.events.emit("preview_ended")
        logger.debug("Preview ended; game active")

    # -------- Save / Load --------
    def snapshot(self) -> GameSnapshot:
        cards = self._grid.get_all_cards() if self._grid is not None else []
        return GameSnapshot(
            score=self._score,
            turns=self._turns,
            matched_pairs=self._matched_pairs,
            grid_rows=self._rows,
            grid_columns=self._columns,
            card_states=tuple(
                CardSaveData(card_index=i, card_id=c.pair_id, state=c.state) for i, c in enumerate(cards)
            ),
        )

    def save_game(self) -> bool:
        if self._persistence is None or not self._active:
            return False
        try:
            self._persistence.save_game(self.snapshot())
        except PersistenceError as e:
            logger.warning("Save failed: %s", e)
            return False
        logger.debug("Game saved")
        return True

    def load_game(self) -> bool:
        if self._grid is None:
            logger.error("No grid provider configured; cannot load")
            return False
        if not self._has_saved_game():
            return False
        assert self._persistence is not None
        try:
            data = self._persistence.load_game()
        except PersistenceError as e:
            logger.error("Saved game could not be read: %s", e)
            return False
        if data is None:
            return False
        if not self._grid.is_valid_grid_size(data.grid_rows, data.grid_columns):
            logger.error("Saved game has invalid grid size: %dx%d", data.grid_rows, data.grid_columns)
            return False

        logger.info("Loading saved game")
        self._reset_session()
        self._score = data.score
        self._turns = data.turns
        self._matched_pairs = data.matched_pairs
        self._rows = data.grid_rows
        self._columns = data.grid_columns
        if self._score_tracker is not None:
            self._score_tracker.restore_score(data.score)

        self._grid.generate_grid(self._rows, self._columns, layout=data.layout())
        if data.card_states:
            self._restore_card_states(data.card_states)

        self._active = True
        self._publish_counters()
        self.events.emit("game_started")
        logger.info("Game loaded: score %d, turns %d", self._score, self._turns)
        return True

    def _restore_card_states(self, saved: tuple[CardSaveData, ...]) -> None:
        assert self._grid is not None
        cards = self._grid.get_all_cards()
        for entry in saved:
            if not 0 <= entry.card_index < len(cards):
                logger.warning("Skipping saved card with out-of-range index %d", entry.card_index)
                continue
            card = cards[entry.card_index]
            if entry.state == FACE_UP:
                # Shown, but not part of the evaluation set.
                card.flip_to_front(immediate=True)
            elif entry.state == MATCHED:
                card.flip_to_front(immediate=True)
                card.set_matched()
            else:
                card.reset_card()

    def _has_saved_game(self) -> bool:
        if self._persistence is None:
            return False
        return self._persistence.has_saved_game()

    def _clear_saved_game(self) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.clear_saved_game()
        except PersistenceError as e:
            logger.warning("Could not clear saved game: %s", e)

    # -------- Internals --------
    def _cancel_timers(self) -> None:
        if self._mismatch_timer is not None:
            self._mismatch_timer.cancel()
            self._mismatch_timer = None
        if self._preview_timer is not None:
            self._preview_timer.cancel()
            self._preview_timer = None

    def _reset_session(self) -> None:
        self._cancel_timers()
        self._score = 0
        self._turns = 0
        self._matched_pairs = 0
        self._active = False
        self._preview = False
        if self._score_tracker is not None:
            self._score_tracker.reset_score()
        self._flipped.clear()
        self._pending.clear()
        self._evaluating = False

    def _publish_counters(self) -> None:
        self.events.emit("score_changed", self._score)
        self.events.emit("turns_changed", self._turns)
        self.events.emit("pairs_changed", self._matched_pairs, self.total_pairs)
