from __future__ import annotations

from dataclasses import dataclass

import pygame  # type: ignore[import-not-found]

Color = tuple[int, int, int]

CARD_BACK: Color = (52, 64, 110)
CARD_BACK_EDGE: Color = (90, 104, 160)
MATCHED_TINT: Color = (30, 30, 30)


@dataclass
class Fonts:
    ui: pygame.font.Font
    small: pygame.font.Font
    big: pygame.font.Font
    card: pygame.font.Font


class AssetManager:
    """Fonts and the card palette. Cards are drawn procedurally, no image files."""

    def __init__(self) -> None:
        self._palette: dict[tuple[int, int], Color] = {}

        pygame.font.init()
        self.fonts = Fonts(
            ui=pygame.font.SysFont(None, 24),
            small=pygame.font.SysFont(None, 18),
            big=pygame.font.SysFont(None, 34),
            card=pygame.font.SysFont(None, 42),
        )

    def pair_color(self, pair_id: int, total_pairs: int) -> Color:
        key = (pair_id, total_pairs)
        if key in self._palette:
            return self._palette[key]
        c = pygame.Color(0, 0, 0)
        hue = (pair_id * 360.0 / max(1, total_pairs)) % 360.0
        c.hsva = (hue, 60, 90, 100)
        color = (c.r, c.g, c.b)
        self._palette[key] = color
        return color

    @staticmethod
    def dim(color: Color) -> Color:
        return tuple(max(0, v - t) for v, t in zip(color, MATCHED_TINT))  # type: ignore[return-value]
