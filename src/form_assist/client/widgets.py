"""In-memory view model standing in for the form markup.

Each widget mirrors the bits of DOM state the controller touches: value,
disabled flag, visibility, label text and CSS classes.
"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Callable


def _schedule(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass
class TextField:
    value: str = ""
    disabled: bool = False
    classes: set[str] = field(default_factory=set)
    _flash_timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    def flash(self, css_class: str, duration: float) -> None:
        """Add a class and drop it again after `duration` seconds."""
        if self._flash_timer is not None:
            self._flash_timer.cancel()
        self.classes.add(css_class)
        self._flash_timer = _schedule(duration, lambda: self.classes.discard(css_class))


@dataclass
class TriggerButton:
    label: str = "Generate with AI"
    hidden: bool = True
    disabled: bool = False
    classes: set[str] = field(default_factory=set)


@dataclass
class Banner:
    """Transient message slot that hides itself after a delay."""

    message: str = ""
    hidden: bool = True
    _timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    def show(self, message: str, dismiss_after: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self.message = message
        self.hidden = False
        self._timer = _schedule(dismiss_after, self.hide)

    def hide(self) -> None:
        self.hidden = True
        self._timer = None


@dataclass
class FormView:
    textarea: TextField = field(default_factory=TextField)
    trigger: TriggerButton = field(default_factory=TriggerButton)
    success_banner: Banner = field(default_factory=Banner)
    error_banner: Banner = field(default_factory=Banner)
