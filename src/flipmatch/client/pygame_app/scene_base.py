from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import pygame  # type: ignore[import-not-found]


@dataclass
class SceneTransition:
    next_scene: "Scene"


class Scene(Protocol):
    """One screen of the client. The App drives it once per frame, after engine timers have run."""

    def handle_event(self, event: pygame.event.Event) -> None: ...
    def update(self, dt: float) -> SceneTransition | None: ...
    def render(self, screen: pygame.Surface) -> None: ...

    def leave(self) -> None:
        """Called once when the App switches away from this scene or shuts down."""
        ...


def switch_scene(current: Scene, transition: SceneTransition | None) -> Scene:
    if transition is None:
        return current
    current.leave()
    return transition.next_scene
