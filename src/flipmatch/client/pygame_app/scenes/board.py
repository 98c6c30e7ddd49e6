from __future__ import annotations

import pygame  # type: ignore[import-not-found]

from flipmatch.engine.grid import Card, CardGrid
from flipmatch.engine.matching import MatchingEngine
from flipmatch.engine.types import FACE_DOWN, MATCHED

from ..app import GameContext
from ..asset_manager import CARD_BACK, CARD_BACK_EDGE, AssetManager
from ..scene_base import Scene, SceneTransition
from ..ui import Button, draw_centered, draw_text

BOARD_TOP = 90
BOARD_MARGIN = 24
CARD_GAP = 10


class BoardScene:
    def __init__(self, ctx: GameContext) -> None:
        assert ctx.engine is not None and ctx.grid is not None
        self.ctx = ctx
        self.engine: MatchingEngine = ctx.engine
        self.grid: CardGrid = ctx.grid
        self._next: SceneTransition | None = None
        self._won = self.engine.total_pairs > 0 and self.engine.matched_pairs == self.engine.total_pairs
        self._message = ""

        self.engine.events.subscribe("game_won", self._on_won)
        self.engine.events.subscribe("game_started", self._on_started)

        w, _h = ctx.screen.get_size()
        self.btn_restart = Button(rect=pygame.Rect(w - 440, 20, 130, 40), text="Restart", on_click=self._on_restart)
        self.btn_save = Button(rect=pygame.Rect(w - 300, 20, 130, 40), text="Save", on_click=self._on_save)
        self.btn_menu = Button(rect=pygame.Rect(w - 160, 20, 130, 40), text="Menu", on_click=self._on_menu)
        self.btn_again = Button(rect=pygame.Rect(w // 2 - 150, 420, 300, 56), text="Play Again", on_click=self._on_restart)

    # -------- Event handlers --------
    def _on_won(self) -> None:
        self._won = True

    def _on_started(self) -> None:
        self._won = False
        self._message = ""

    def _on_restart(self) -> None:
        self.engine.restart()

    def _on_save(self) -> None:
        self._message = "Game saved." if self.engine.save_game() else "Nothing to save right now."

    def _on_menu(self) -> None:
        from .main_menu import MainMenuScene

        self._go(MainMenuScene(self.ctx))

    def _go(self, scene: Scene) -> None:
        self._next = SceneTransition(scene)

    # -------- Layout --------
    def _card_rects(self) -> list[pygame.Rect]:
        w, h = self.ctx.screen.get_size()
        rows, cols = self.grid.rows, self.grid.columns
        if rows == 0 or cols == 0:
            return []
        area_w = w - 2 * BOARD_MARGIN
        area_h = h - BOARD_TOP - BOARD_MARGIN
        size = min((area_w - CARD_GAP * (cols - 1)) // cols, (area_h - CARD_GAP * (rows - 1)) // rows)
        left = (w - (size * cols + CARD_GAP * (cols - 1))) // 2
        rects: list[pygame.Rect] = []
        for r in range(rows):
            for c in range(cols):
                rects.append(pygame.Rect(left + c * (size + CARD_GAP), BOARD_TOP + r * (size + CARD_GAP), size, size))
        return rects

    def _hit_test(self, pos: tuple[int, int]) -> int | None:
        for i, rect in enumerate(self._card_rects()):
            if rect.collidepoint(pos):
                return i
        return None

    # -------- Scene protocol --------
    def handle_event(self, event: pygame.event.Event) -> None:
        if self._won:
            self.btn_again.handle_event(event)
            self.btn_menu.handle_event(event)
            return
        for b in (self.btn_restart, self.btn_save, self.btn_menu):
            if b.handle_event(event):
                return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            index = self._hit_test(event.pos)
            if index is not None:
                self.grid.click(index)
        if event.type == pygame.KEYDOWN and event.key == pygame.K_r:
            self._on_restart()

    def leave(self) -> None:
        self.engine.events.unsubscribe("game_won", self._on_won)
        self.engine.events.unsubscribe("game_started", self._on_started)

    def update(self, dt: float) -> SceneTransition | None:
        self.btn_save.enabled = self.engine.can_save
        return self._next

    def _draw_card(self, screen: pygame.Surface, card: Card, rect: pygame.Rect, assets: AssetManager) -> None:
        if card.state == FACE_DOWN:
            pygame.draw.rect(screen, CARD_BACK, rect, border_radius=10)
            pygame.draw.rect(screen, CARD_BACK_EDGE, rect.inflate(-12, -12), width=2, border_radius=8)
            return
        color = assets.pair_color(card.pair_id, self.grid.total_pairs)
        if card.state == MATCHED:
            color = assets.dim(color)
        pygame.draw.rect(screen, color, rect, border_radius=10)
        pygame.draw.rect(screen, (0, 0, 0), rect, width=2, border_radius=10)
        draw_centered(screen, assets.fonts.card, str(card.pair_id + 1), rect, (20, 20, 20))

    def render(self, screen: pygame.Surface) -> None:
        screen.fill((14, 16, 24))
        assets = self.ctx.assets
        fonts = assets.fonts
        e = self.engine

        draw_text(screen, fonts.big, f"Score {e.score}", (24, 18))
        draw_text(
            screen,
            fonts.ui,
            f"Turns {e.turns}   Pairs {e.matched_pairs}/{e.total_pairs}   Grid {e.grid_size_text()}",
            (24, 54),
        )
        for b in (self.btn_restart, self.btn_save, self.btn_menu):
            b.draw(screen, fonts.ui)

        for card, rect in zip(self.grid.get_all_cards(), self._card_rects()):
            self._draw_card(screen, card, rect, assets)

        if e.is_preview_phase:
            draw_text(screen, fonts.ui, "Memorize the cards...", (24, screen.get_height() - 24), color=(250, 220, 120))
        elif self._message:
            draw_text(screen, fonts.small, self._message, (24, screen.get_height() - 20))

        if self._won:
            overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            overlay.fill((0, 0, 0, 170))
            screen.blit(overlay, (0, 0))
            w = screen.get_width()
            draw_centered(screen, fonts.big, "All pairs found!", pygame.Rect(0, 300, w, 40))
            draw_centered(screen, fonts.ui, f"{e.turns} turns, score {e.score}", pygame.Rect(0, 350, w, 30))
            self.btn_again.draw(screen, fonts.ui)
            self.btn_menu.draw(screen, fonts.ui)
