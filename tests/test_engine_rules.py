from __future__ import annotations

import logging

import pytest

from flipmatch.engine.events import EventBus
from flipmatch.engine.grid import CardGrid
from flipmatch.engine.matching import EngineConfig, MatchingEngine
from flipmatch.engine.score import ComboScoreTracker
from flipmatch.engine.snapshot import GameSnapshot
from flipmatch.engine.timers import FrameScheduler
from flipmatch.engine.types import FACE_DOWN, FACE_UP, MATCHED


class _MemoryStore:
    def __init__(self) -> None:
        self.snapshot: GameSnapshot | None = None

    def has_saved_game(self) -> bool:
        return self.snapshot is not None

    def save_game(self, snapshot: GameSnapshot) -> None:
        self.snapshot = snapshot

    def load_game(self) -> GameSnapshot | None:
        return self.snapshot

    def clear_saved_game(self) -> None:
        self.snapshot = None


def _new_engine(
    rows: int = 4,
    columns: int = 4,
    *,
    preview: bool = False,
    continuous: bool = True,
    store: _MemoryStore | None = None,
    tracker: ComboScoreTracker | None = None,
) -> tuple[MatchingEngine, CardGrid, FrameScheduler]:
    grid = CardGrid(seed=11)
    scheduler = FrameScheduler()
    cfg = EngineConfig(
        enable_preview=preview,
        allow_continuous_flipping=continuous,
        default_rows=rows,
        default_columns=columns,
    )
    engine = MatchingEngine(
        grid,
        scheduler,
        score_tracker=tracker,
        persistence=store,
        config=cfg,
        events=EventBus(record=True),
    )
    assert engine.initialize()
    return engine, grid, scheduler


def _pairs(grid: CardGrid) -> dict[int, list[int]]:
    out: dict[int, list[int]] = {}
    for card in grid.get_all_cards():
        out.setdefault(card.pair_id, []).append(card.index)
    return out


def test_new_game_without_preview_is_active_immediately() -> None:
    engine, grid, _ = _new_engine(4, 4)
    assert engine.is_active
    assert not engine.is_preview_phase
    assert engine.turns == 0
    assert engine.score == 0
    assert engine.total_pairs == 8
    assert all(c.state == FACE_DOWN for c in grid.get_all_cards())


def test_matching_pair_is_kept() -> None:
    engine, grid, scheduler = _new_engine()
    a, b = _pairs(grid)[0]

    grid.click(a)
    grid.click(b)

    cards = grid.get_all_cards()
    assert cards[a].state == MATCHED
    assert cards[b].state == MATCHED
    assert engine.matched_pairs == 1
    assert engine.turns == 1
    assert "match_found" in engine.events.names()
    assert scheduler.pending_count() == 0
    assert not engine.is_evaluating
    assert engine.flipped_cards == ()


def test_match_event_order() -> None:
    engine, grid, _ = _new_engine()
    a, b = _pairs(grid)[0]
    before = len(engine.events.history)

    grid.click(a)
    grid.click(b)

    assert engine.events.names()[before:] == [
        "card_flipped",
        "card_flipped",
        "turns_changed",
        "match_found",
        "score_changed",
        "pairs_changed",
    ]
    assert engine.events.history[-1]["args"] == [1, 8]


def test_mismatch_flips_back_after_delay() -> None:
    engine, grid, scheduler = _new_engine()
    pairs = _pairs(grid)
    a = pairs[0][0]
    c = pairs[1][0]

    grid.click(a)
    grid.click(c)

    cards = grid.get_all_cards()
    assert cards[a].state == FACE_UP
    assert cards[c].state == FACE_UP
    assert engine.turns == 1
    assert engine.is_evaluating
    assert scheduler.pending_count() == 1

    scheduler.tick(engine.config.mismatch_delay - 0.1)
    assert cards[a].state == FACE_UP

    scheduler.tick(0.2)
    assert cards[a].state == FACE_DOWN
    assert cards[c].state == FACE_DOWN
    assert engine.flipped_cards == ()
    assert not engine.is_evaluating


def test_final_pair_wins_and_clears_save() -> None:
    store = _MemoryStore()
    engine, grid, _ = _new_engine(2, 2, store=store)
    pairs = _pairs(grid)

    grid.click(pairs[0][0])
    grid.click(pairs[0][1])
    # progress is autosaved after a non-final match
    assert store.has_saved_game()

    grid.click(pairs[1][0])
    grid.click(pairs[1][1])

    assert not engine.is_active
    assert "game_won" in engine.events.names()
    assert not store.has_saved_game()
    assert engine.matched_pairs == 2


def test_new_game_cancels_pending_mismatch() -> None:
    engine, grid, scheduler = _new_engine()
    pairs = _pairs(grid)
    old_cards = grid.get_all_cards()
    a = pairs[0][0]
    c = pairs[1][0]
    grid.click(a)
    grid.click(c)

    assert engine.start_new_game(4, 4)
    scheduler.tick(10.0)

    # The superseded session's cards were never touched by the stale timer.
    assert old_cards[a].state == FACE_UP
    assert old_cards[c].state == FACE_UP
    assert all(card.state == FACE_DOWN for card in grid.get_all_cards())
    assert not engine.is_evaluating
    assert engine.turns == 0


def test_rejected_clicks_do_not_count() -> None:
    engine, grid, _ = _new_engine()
    a = _pairs(grid)[0][0]

    engine.on_card_clicked(None)
    grid.click(a)
    grid.click(a)  # double click on the same card

    assert len(engine.flipped_cards) == 1
    assert engine.turns == 0
    assert engine.events.names().count("turns_changed") == 1  # only the game-start publish


def test_matched_card_cannot_be_flipped_again() -> None:
    engine, grid, _ = _new_engine()
    a, b = _pairs(grid)[0]
    grid.click(a)
    grid.click(b)

    grid.click(a)
    assert engine.flipped_cards == ()
    assert engine.turns == 1


def test_queued_clicks_are_replayed_after_mismatch() -> None:
    engine, grid, scheduler = _new_engine(continuous=True)
    pairs = _pairs(grid)
    grid.click(pairs[0][0])
    grid.click(pairs[1][0])

    # both slots busy during the cool-down: these clicks wait in the queue
    grid.click(pairs[2][0])
    grid.click(pairs[2][1])
    assert engine.pending_clicks == 2
    assert len(engine.flipped_cards) == 2

    scheduler.tick(engine.config.mismatch_delay)

    cards = grid.get_all_cards()
    assert cards[pairs[2][0]].state == MATCHED
    assert cards[pairs[2][1]].state == MATCHED
    assert engine.turns == 2
    assert engine.pending_clicks == 0


def test_strict_mode_drops_clicks_during_evaluation() -> None:
    engine, grid, scheduler = _new_engine(continuous=False)
    pairs = _pairs(grid)
    grid.click(pairs[0][0])
    grid.click(pairs[1][0])

    grid.click(pairs[2][0])
    assert engine.pending_clicks == 0

    scheduler.tick(engine.config.mismatch_delay)
    assert grid.get_all_cards()[pairs[2][0]].state == FACE_DOWN
    assert engine.flipped_cards == ()

    grid.click(pairs[2][0])
    assert len(engine.flipped_cards) == 1


def test_flipped_cards_never_exceed_limit() -> None:
    engine, grid, scheduler = _new_engine(continuous=True)
    for index in range(len(grid.get_all_cards())):
        grid.click(index)
        assert len(engine.flipped_cards) <= engine.config.max_flipped_cards
        scheduler.tick(0.3)
        assert len(engine.flipped_cards) <= engine.config.max_flipped_cards


def test_turns_increment_once_per_evaluation() -> None:
    engine, grid, scheduler = _new_engine()
    pairs = _pairs(grid)
    grid.click(pairs[0][0])
    grid.click(pairs[1][0])
    scheduler.tick(engine.config.mismatch_delay)
    grid.click(pairs[2][0])
    grid.click(pairs[2][1])
    assert engine.turns == 2
    assert engine.events.names().count("turns_changed") == 3  # one from game start


def test_score_mirrors_tracker() -> None:
    tracker = ComboScoreTracker()
    engine, grid, scheduler = _new_engine(tracker=tracker)
    pairs = _pairs(grid)

    grid.click(pairs[0][0])
    grid.click(pairs[0][1])
    assert engine.score == 10
    grid.click(pairs[1][0])
    grid.click(pairs[1][1])
    assert engine.score == 25  # second match in a row earns the combo bonus

    grid.click(pairs[2][0])
    grid.click(pairs[3][0])
    scheduler.tick(engine.config.mismatch_delay)
    assert tracker.combo == 0
    assert engine.score == tracker.total_score


def test_score_counts_pairs_without_tracker() -> None:
    engine, grid, _ = _new_engine()
    a, b = _pairs(grid)[0]
    grid.click(a)
    grid.click(b)
    assert engine.score == 1


def test_preview_reveals_then_hides_cards() -> None:
    engine, grid, scheduler = _new_engine(preview=True)
    cards = grid.get_all_cards()

    assert engine.is_preview_phase
    assert not engine.is_active
    assert all(c.state == FACE_UP and not c.interactable for c in cards)
    assert not grid.click(0)
    engine.on_card_clicked(cards[0])
    assert engine.flipped_cards == ()

    scheduler.tick(engine.preview_duration)

    assert engine.is_active
    assert not engine.is_preview_phase
    assert all(c.state == FACE_DOWN and c.interactable for c in cards)
    names = engine.events.names()
    assert names.index("preview_started") < names.index("preview_ended")


def test_preview_clicks_are_not_replayed() -> None:
    engine, grid, scheduler = _new_engine(preview=True)
    engine.on_card_clicked(grid.get_all_cards()[0])
    scheduler.tick(engine.preview_duration)
    assert engine.flipped_cards == ()
    assert engine.pending_clicks == 0


def test_active_and_preview_are_exclusive() -> None:
    engine, _, scheduler = _new_engine(preview=True)
    for _ in range(30):
        assert not (engine.is_active and engine.is_preview_phase)
        scheduler.tick(0.1)
    assert engine.is_active


def test_new_game_supersedes_running_preview() -> None:
    engine, _, scheduler = _new_engine(preview=True)
    duration = engine.preview_duration
    scheduler.tick(duration - 0.5)

    engine.start_new_game(4, 4)
    scheduler.tick(0.6)
    assert engine.is_preview_phase

    scheduler.tick(duration)
    assert engine.is_active
    assert engine.events.names().count("preview_ended") == 1


def test_preview_duration_is_clamped() -> None:
    engine, _, _ = _new_engine()
    engine.set_preview(True, 0.1)
    assert engine.preview_enabled
    assert engine.preview_duration == 0.5
    engine.set_preview(False, 3.0)
    assert engine.preview_duration == 3.0


def test_invalid_grid_size_is_rejected(caplog: pytest.LogCaptureFixture) -> None:
    engine, grid, _ = _new_engine(4, 4)
    before = grid.get_all_cards()

    with caplog.at_level(logging.ERROR):
        assert not engine.start_new_game(3, 3)

    assert "Invalid grid size" in caplog.text
    assert engine.grid_size_text() == "4x4"
    assert grid.get_all_cards() == before
    assert engine.is_active


def test_missing_grid_provider_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    engine = MatchingEngine(None, FrameScheduler())
    with caplog.at_level(logging.ERROR):
        assert not engine.initialize()
        assert not engine.start_new_game(4, 4)
    assert "No grid provider" in caplog.text
    assert not engine.is_active
    assert engine.total_pairs == 0


def test_restart_reuses_last_grid_size() -> None:
    engine, grid, _ = _new_engine(4, 4)
    engine.start_new_game(2, 3)
    a, b = _pairs(grid)[0]
    grid.click(a)
    grid.click(b)

    assert engine.restart()
    assert engine.grid_size_text() == "2x3"
    assert engine.total_pairs == 3
    assert engine.matched_pairs == 0


def test_set_grid_size_applies_on_restart() -> None:
    engine, _, _ = _new_engine(4, 4)
    engine.set_grid_size(2, 4)
    assert engine.total_pairs == 8
    engine.restart()
    assert engine.total_pairs == 4


def test_only_pairwise_matching_is_supported() -> None:
    with pytest.raises(ValueError):
        EngineConfig(max_flipped_cards=3)


def test_shutdown_stops_input_and_timers() -> None:
    engine, grid, scheduler = _new_engine()
    pairs = _pairs(grid)
    grid.click(pairs[0][0])
    grid.click(pairs[1][0])

    engine.shutdown()
    scheduler.tick(10.0)

    assert grid.get_all_cards()[pairs[0][0]].state == FACE_UP
    grid.click(pairs[2][0])
    assert engine.pending_clicks == 0
    assert grid.get_all_cards()[pairs[2][0]].state == FACE_DOWN
    assert not engine.is_active
