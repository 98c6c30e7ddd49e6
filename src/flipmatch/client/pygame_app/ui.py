from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import pygame  # type: ignore[import-not-found]

Color = tuple[int, int, int]

TEXT: Color = (240, 240, 240)
PANEL: Color = (40, 40, 40)
BORDER: Color = (0, 0, 0)


def draw_text(
    screen: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    pos: tuple[int, int],
    color: Color = TEXT,
) -> None:
    screen.blit(font.render(text, True, color), pos)


def draw_centered(screen: pygame.Surface, font: pygame.font.Font, text: str, rect: pygame.Rect, color: Color = TEXT) -> None:
    img = font.render(text, True, color)
    screen.blit(img, img.get_rect(center=rect.center).topleft)


def _left_click(event: pygame.event.Event, rect: pygame.Rect) -> bool:
    return event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and rect.collidepoint(event.pos)


@dataclass
class Button:
    rect: pygame.Rect
    text: str
    on_click: Callable[[], None]
    enabled: bool = True

    def handle_event(self, event: pygame.event.Event) -> bool:
        if self.enabled and _left_click(event, self.rect):
            self.on_click()
            return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        bg = (60, 60, 60) if self.enabled else (30, 30, 30)
        pygame.draw.rect(screen, bg, self.rect, border_radius=8)
        pygame.draw.rect(screen, BORDER, self.rect, width=2, border_radius=8)
        draw_centered(screen, font, self.text, self.rect, TEXT if self.enabled else (120, 120, 120))


@dataclass
class Toggle:
    rect: pygame.Rect
    label: str
    value: bool
    on_change: Callable[[bool], None]

    def handle_event(self, event: pygame.event.Event) -> bool:
        if _left_click(event, self.rect):
            self.value = not self.value
            self.on_change(self.value)
            return True
        return False

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(screen, PANEL, self.rect, border_radius=8)
        pygame.draw.rect(screen, BORDER, self.rect, width=2, border_radius=8)
        box = pygame.Rect(self.rect.x + 10, self.rect.y + 10, 22, 22)
        pygame.draw.rect(screen, (220, 220, 220), box, width=2)
        if self.value:
            pygame.draw.rect(screen, (220, 220, 220), box.inflate(-8, -8))
        draw_text(screen, font, self.label, (box.right + 10, self.rect.y + 12))


@dataclass
class Stepper:
    """Label plus -/+ buttons over a bounded numeric value."""

    rect: pygame.Rect
    label: str
    value: float
    step: float
    minimum: float
    maximum: float
    on_change: Callable[[float], None]
    fmt: str = "{:g}"

    def _minus_rect(self) -> pygame.Rect:
        return pygame.Rect(self.rect.right - 120, self.rect.y + 6, 32, self.rect.height - 12)

    def _plus_rect(self) -> pygame.Rect:
        return pygame.Rect(self.rect.right - 40, self.rect.y + 6, 32, self.rect.height - 12)

    def handle_event(self, event: pygame.event.Event) -> bool:
        if _left_click(event, self._minus_rect()):
            delta = -self.step
        elif _left_click(event, self._plus_rect()):
            delta = self.step
        else:
            return False
        new_value = min(self.maximum, max(self.minimum, self.value + delta))
        if new_value != self.value:
            self.value = new_value
            self.on_change(new_value)
        return True

    def draw(self, screen: pygame.Surface, font: pygame.font.Font) -> None:
        pygame.draw.rect(screen, PANEL, self.rect, border_radius=8)
        pygame.draw.rect(screen, BORDER, self.rect, width=2, border_radius=8)
        draw_text(screen, font, self.label, (self.rect.x + 12, self.rect.y + 12))
        minus, plus = self._minus_rect(), self._plus_rect()
        for r, sign in ((minus, "-"), (plus, "+")):
            pygame.draw.rect(screen, (60, 60, 60), r, border_radius=6)
            draw_centered(screen, font, sign, r)
        value_rect = pygame.Rect(minus.right, self.rect.y, plus.left - minus.right, self.rect.height)
        draw_centered(screen, font, self.fmt.format(self.value), value_rect)
