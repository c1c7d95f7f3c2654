from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Literal

from render.types import ScreenPoint

Fade = Literal["in", "out"]


@dataclass
class TooltipLabel:
    """
    Region-name label shown above the pointer while highlighting.

    Only records what a client should display; the fade itself is animated client-side.
    """

    fade_s: float = 0.25
    text: str | None = None
    anchor: ScreenPoint | None = None
    visible: bool = False
    fade: Fade | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def show(self, text: str, anchor: ScreenPoint) -> None:
        with self._lock:
            self.fade = "in" if not self.visible or self.text != text else None
            self.text = text
            self.anchor = anchor
            self.visible = True

    def hide(self) -> None:
        with self._lock:
            if not self.visible:
                return
            self.visible = False
            self.fade = "out"

    def as_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "text": self.text,
                "x": self.anchor.x if self.anchor is not None else None,
                "y": self.anchor.y if self.anchor is not None else None,
                "visible": self.visible,
                "fade": self.fade,
                "fadeS": self.fade_s,
            }
