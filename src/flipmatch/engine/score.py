from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreConfig:
    points_per_match: int = 10
    combo_bonus: int = 5
    max_combo_bonus: int = 25


class ComboScoreTracker:
    """Accumulates match events into a score.

    Consecutive matches grow a bonus of `combo_bonus` per step (capped at
    `max_combo_bonus`); any mismatch resets the streak.
    """

    def __init__(self, config: ScoreConfig | None = None) -> None:
        self.config = config or ScoreConfig()
        self._total = 0
        self.combo = 0
        self.best_combo = 0

    @property
    def total_score(self) -> int:
        return self._total

    def register_match(self) -> None:
        bonus = min(self.config.max_combo_bonus, self.combo * self.config.combo_bonus)
        self._total += self.config.points_per_match + bonus
        self.combo += 1
        self.best_combo = max(self.best_combo, self.combo)

    def register_mismatch(self) -> None:
        self.combo = 0

    def reset_score(self) -> None:
        self._total = 0
        self.combo = 0
        self.best_combo = 0

    def restore_score(self, total: int) -> None:
        self._total = max(0, total)
        self.combo = 0
