from __future__ import annotations

import argparse
import logging

import pygame  # type: ignore[import-not-found]

from flipmatch.engine.timers import FrameScheduler
from flipmatch.paths import get_paths
from flipmatch.services.telemetry import TelemetryService

from .app import App, GameContext
from .asset_manager import AssetManager
from .scenes.boot import BootScene


def main() -> int:
    parser = argparse.ArgumentParser(prog="flipmatch")
    parser.add_argument("--width", type=int, default=1024)
    parser.add_argument("--height", type=int, default=768)
    parser.add_argument("--seed", type=int, default=None, help="seed card shuffling")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pygame.init()
    screen = pygame.display.set_mode((args.width, args.height))
    pygame.display.set_caption("flipmatch")

    paths = get_paths()
    ctx = GameContext(
        screen=screen,
        clock=pygame.time.Clock(),
        paths=paths,
        assets=AssetManager(),
        scheduler=FrameScheduler(),
        telemetry=TelemetryService(paths.telemetry_path),
        seed=args.seed,
    )

    app = App(ctx, BootScene(ctx))
    try:
        return app.run()
    finally:
        pygame.quit()


if __name__ == "__main__":
    raise SystemExit(main())
