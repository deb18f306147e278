from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


ButtonState = Literal["idle", "hover", "disabled"]


@dataclass
class ButtonModel:
    """Hover/disabled state of one pagination button."""

    disabled: bool = False
    hovered: bool = False
    state: ButtonState = "idle"

    def __post_init__(self) -> None:
        self._sync_state()

    def set_disabled(self, disabled: bool) -> ButtonState:
        self.disabled = disabled
        self._sync_state()
        return self.state

    def set_hovered(self, hovered: bool) -> ButtonState:
        self.hovered = hovered
        self._sync_state()
        return self.state

    def press(self) -> bool:
        """Return True when the press should trigger the button's action."""

        return not self.disabled

    def _sync_state(self) -> None:
        if self.disabled:
            self.state = "disabled"
        elif self.hovered:
            self.state = "hover"
        else:
            self.state = "idle"
