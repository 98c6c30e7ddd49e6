from __future__ import annotations

import logging
import traceback

import pygame  # type: ignore[import-not-found]

from flipmatch.engine.grid import CardGrid
from flipmatch.engine.matching import MatchingEngine
from flipmatch.engine.score import ComboScoreTracker
from flipmatch.services.persistence import JsonSaveStore
from flipmatch.services.settings import SettingsService

from ..app import GameContext
from ..scene_base import SceneTransition
from ..ui import Button, draw_text
from .board import BoardScene

logger = logging.getLogger(__name__)


class BootScene:
    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self._did_boot = False
        self._error: str | None = None
        self._quit_button: Button | None = None

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._quit_button is not None:
            self._quit_button.handle_event(event)

    def _build(self) -> None:
        paths = self.ctx.paths
        paths.userdata_dir.mkdir(parents=True, exist_ok=True)
        self.ctx.settings = SettingsService(paths.settings_path, paths.schema_dir)
        self.ctx.save_store = JsonSaveStore(paths.save_path, paths.schema_dir)
        self.ctx.grid = CardGrid(seed=self.ctx.seed)

        engine = MatchingEngine(
            self.ctx.grid,
            self.ctx.scheduler,
            score_tracker=ComboScoreTracker(),
            persistence=self.ctx.save_store,
            config=self.ctx.settings.settings.to_engine_config(),
        )
        self.ctx.telemetry.attach(engine.events, engine)
        self.ctx.engine = engine

    def leave(self) -> None:
        pass

    def update(self, dt: float) -> SceneTransition | None:
        if self._did_boot:
            return None
        self._did_boot = True
        try:
            self._build()
            assert self.ctx.engine is not None
            if not self.ctx.engine.initialize():
                raise RuntimeError("Engine failed to start a game; see log.")
            return SceneTransition(BoardScene(self.ctx))
        except (RuntimeError, OSError, ValueError) as e:
            logger.exception("Boot failed")
            self._error = f"{e}\n\n{traceback.format_exc(limit=8)}"
            self.ctx.telemetry.log("boot", {"ok": False, "error": str(e)})
            self._quit_button = Button(
                rect=pygame.Rect(20, 700, 140, 44),
                text="Quit",
                on_click=lambda: pygame.event.post(pygame.event.Event(pygame.QUIT)),
            )
            return None

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((10, 10, 10))
        fonts = self.ctx.assets.fonts
        draw_text(screen, fonts.big, "flipmatch", (20, 20))
        if self._error is None:
            draw_text(screen, fonts.ui, "Loading settings and saved game...", (20, 80))
            return
        draw_text(screen, fonts.ui, "BOOT ERROR", (20, 80), color=(240, 80, 80))
        y = 120
        for line in self._error.splitlines()[:22]:
            draw_text(screen, fonts.small, line[:120], (20, y), color=(230, 230, 230))
            y += 18
        if self._quit_button is not None:
            self._quit_button.draw(screen, fonts.ui)
