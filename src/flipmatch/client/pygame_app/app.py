from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pygame  # type: ignore[import-not-found]

from flipmatch.engine.grid import CardGrid
from flipmatch.engine.matching import MatchingEngine
from flipmatch.engine.timers import FrameScheduler
from flipmatch.paths import Paths
from flipmatch.services.persistence import JsonSaveStore
from flipmatch.services.settings import SettingsService
from flipmatch.services.telemetry import TelemetryService

from .asset_manager import AssetManager
from .scene_base import Scene, switch_scene


@dataclass
class GameContext:
    screen: pygame.Surface
    clock: pygame.time.Clock
    paths: Paths
    assets: AssetManager
    scheduler: FrameScheduler
    telemetry: TelemetryService
    seed: int | None = None

    # Built at boot
    settings: Optional[SettingsService] = None
    save_store: Optional[JsonSaveStore] = None
    grid: Optional[CardGrid] = None
    engine: Optional[MatchingEngine] = None


class App:
    def __init__(self, ctx: GameContext, initial_scene: Scene) -> None:
        self.ctx = ctx
        self.scene: Scene = initial_scene
        self.running = True

    def run(self) -> int:
        while self.running:
            dt = self.ctx.clock.tick(60) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    break
                self.scene.handle_event(event)

            # Engine timers run on this thread, between input and rendering.
            self.ctx.scheduler.tick(dt)

            self.scene = switch_scene(self.scene, self.scene.update(dt))

            self.scene.render(self.ctx.screen)
            pygame.display.flip()

        self.scene.leave()
        if self.ctx.engine is not None:
            self.ctx.engine.shutdown()
        return 0
