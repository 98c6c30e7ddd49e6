from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Protocol

from flipmatch.engine.events import EventBus

RECORDED_EVENTS = ("game_started", "game_won", "preview_started", "preview_ended")


class GameStats(Protocol):
    @property
    def score(self) -> int: ...

    @property
    def turns(self) -> int: ...

    @property
    def matched_pairs(self) -> int: ...

    def grid_size_text(self) -> str: ...


@dataclass
class TelemetryService:
    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def attach(self, events: EventBus, stats: GameStats) -> None:
        """Record game-level engine events with the session counters at that moment."""
        for event_type in RECORDED_EVENTS:
            events.subscribe(event_type, self._recorder(event_type, stats))  # type: ignore[arg-type]

    def _recorder(self, event_type: str, stats: GameStats):
        def record() -> None:
            self.log(
                event_type,
                {
                    "score": stats.score,
                    "turns": stats.turns,
                    "matched_pairs": stats.matched_pairs,
                    "grid": stats.grid_size_text(),
                },
            )

        return record
