from __future__ import annotations

import pygame  # type: ignore[import-not-found]

from flipmatch.engine.matching import MIN_PREVIEW_DURATION

from ..app import GameContext
from ..scene_base import Scene, SceneTransition
from ..ui import Button, Stepper, Toggle, draw_text


class SettingsScene:
    def __init__(self, ctx: GameContext) -> None:
        assert ctx.settings is not None
        self.ctx = ctx
        self._next: SceneTransition | None = None
        current = ctx.settings.settings

        self.btn_back = Button(rect=pygame.Rect(20, 20, 120, 40), text="Back", on_click=self._on_back)
        self.toggle_preview = Toggle(
            rect=pygame.Rect(40, 120, 520, 44),
            label="Show all cards at game start",
            value=current.enable_preview,
            on_change=self._on_toggle_preview,
        )
        self.step_duration = Stepper(
            rect=pygame.Rect(40, 176, 520, 44),
            label="Preview seconds",
            value=current.preview_duration,
            step=0.5,
            minimum=MIN_PREVIEW_DURATION,
            maximum=10.0,
            on_change=self._on_duration,
        )
        self.toggle_queue = Toggle(
            rect=pygame.Rect(40, 232, 520, 44),
            label="Queue clicks while cards flip back",
            value=current.allow_continuous_flipping,
            on_change=self._on_toggle_queue,
        )

    def _on_back(self) -> None:
        from .main_menu import MainMenuScene

        self._go(MainMenuScene(self.ctx))

    def _go(self, scene: Scene) -> None:
        self._next = SceneTransition(scene)

    def _apply_preview(self) -> None:
        settings, engine = self.ctx.settings, self.ctx.engine
        assert settings is not None
        settings.set_preview(self.toggle_preview.value, self.step_duration.value)
        if engine is not None:
            engine.set_preview(settings.settings.enable_preview, settings.settings.preview_duration)

    def _on_toggle_preview(self, value: bool) -> None:
        self._apply_preview()

    def _on_duration(self, value: float) -> None:
        self._apply_preview()

    def _on_toggle_queue(self, value: bool) -> None:
        assert self.ctx.settings is not None
        self.ctx.settings.set_continuous_flipping(value)

    def handle_event(self, event: pygame.event.Event) -> None:
        for widget in (self.btn_back, self.toggle_preview, self.step_duration, self.toggle_queue):
            if widget.handle_event(event):
                return

    def leave(self) -> None:
        pass

    def update(self, dt: float) -> SceneTransition | None:
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((12, 12, 18))
        fonts = self.ctx.assets.fonts
        self.btn_back.draw(screen, fonts.ui)
        draw_text(screen, fonts.big, "Settings", (40, 70))
        self.toggle_preview.draw(screen, fonts.ui)
        self.step_duration.draw(screen, fonts.ui)
        self.toggle_queue.draw(screen, fonts.ui)
        draw_text(screen, fonts.small, "Click queueing takes effect the next time the game starts.", (40, 292))
