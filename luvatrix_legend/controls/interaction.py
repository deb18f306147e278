from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping


InteractionType = Literal["click", "dblclick", "hover"]
INTERACTION_TYPES: tuple[str, ...] = ("click", "dblclick", "hover")


@dataclass
class InteractionEvent:
    """Decoded pointer event; `offset_*` is chart space, `page_*` is document space."""

    type: InteractionType
    offset_x: float
    offset_y: float
    page_x: float = 0.0
    page_y: float = 0.0
    _consumed: bool = field(default=False, init=False, repr=False)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> None:
        """Stop delivery to listeners registered after the current one."""

        self._consumed = True


def parse_interaction_event(payload: object) -> InteractionEvent | None:
    """Build an event from a host payload such as `{"type": "click", "x": 10, "y": 4}`.

    Payloads without a known type or numeric coordinates are ignored.
    """

    if not isinstance(payload, Mapping):
        return None
    event_type = payload.get("type")
    if event_type not in INTERACTION_TYPES:
        return None
    try:
        x = float(payload.get("offset_x", payload.get("x")))
        y = float(payload.get("offset_y", payload.get("y")))
        page_x = float(payload.get("page_x", x))
        page_y = float(payload.get("page_y", y))
    except (TypeError, ValueError):
        return None
    return InteractionEvent(type=event_type, offset_x=x, offset_y=y, page_x=page_x, page_y=page_y)
