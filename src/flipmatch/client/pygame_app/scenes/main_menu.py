from __future__ import annotations

import pygame  # type: ignore[import-not-found]

from flipmatch.engine.grid import MAX_SIDE

from ..app import GameContext
from ..scene_base import Scene, SceneTransition
from ..ui import Button, Stepper, draw_text
from .board import BoardScene
from .settings import SettingsScene


class MainMenuScene:
    def __init__(self, ctx: GameContext) -> None:
        assert ctx.engine is not None and ctx.settings is not None
        self.ctx = ctx
        self._next: SceneTransition | None = None
        self._message = ""
        rows, cols = ctx.engine.grid_size
        self._rows = rows
        self._cols = cols
        self._build_ui()

    def _build_ui(self) -> None:
        x, y, w, h, gap = 60, 160, 360, 56, 14

        def row(i: int) -> pygame.Rect:
            return pygame.Rect(x, y + (h + gap) * i, w, h)

        engine = self.ctx.engine
        assert engine is not None
        self.btn_continue = Button(
            rect=row(0),
            text="Continue",
            on_click=lambda: self._go(BoardScene(self.ctx)),
            enabled=engine.is_active or engine.is_preview_phase,
        )
        self.step_rows = Stepper(
            rect=row(1), label="Rows", value=self._rows, step=1, minimum=1, maximum=MAX_SIDE, on_change=self._on_rows
        )
        self.step_cols = Stepper(
            rect=row(2), label="Columns", value=self._cols, step=1, minimum=1, maximum=MAX_SIDE, on_change=self._on_cols
        )
        self._buttons = [
            self.btn_continue,
            Button(rect=row(3), text="New Game", on_click=self._on_new_game),
            Button(rect=row(4), text="Settings", on_click=lambda: self._go(SettingsScene(self.ctx))),
            Button(rect=row(5), text="Quit", on_click=lambda: pygame.event.post(pygame.event.Event(pygame.QUIT))),
        ]

    def _go(self, scene: Scene) -> None:
        self._next = SceneTransition(scene)

    def _on_rows(self, value: float) -> None:
        self._rows = int(value)
        self._message = ""

    def _on_cols(self, value: float) -> None:
        self._cols = int(value)
        self._message = ""

    def _on_new_game(self) -> None:
        engine, settings = self.ctx.engine, self.ctx.settings
        assert engine is not None and settings is not None
        if not engine.start_new_game(self._rows, self._cols):
            self._message = f"{self._rows}x{self._cols} needs an even number of cards (at least 4)."
            return
        settings.set_grid_size(self._rows, self._cols)
        self._go(BoardScene(self.ctx))

    def handle_event(self, event: pygame.event.Event) -> None:
        for widget in (*self._buttons, self.step_rows, self.step_cols):
            if widget.handle_event(event):
                return

    def leave(self) -> None:
        pass

    def update(self, dt: float) -> SceneTransition | None:
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((12, 12, 18))
        fonts = self.ctx.assets.fonts
        draw_text(screen, fonts.big, "flipmatch", (60, 40))
        engine = self.ctx.engine
        if engine is not None and (engine.is_active or engine.is_preview_phase):
            draw_text(
                screen,
                fonts.ui,
                f"In progress: {engine.grid_size_text()}   Pairs {engine.matched_pairs}/{engine.total_pairs}   Score {engine.score}",
                (60, 100),
            )
        for b in self._buttons:
            b.draw(screen, fonts.ui)
        self.step_rows.draw(screen, fonts.ui)
        self.step_cols.draw(screen, fonts.ui)
        if self._message:
            draw_text(screen, fonts.small, self._message, (60, 600), color=(240, 120, 120))
