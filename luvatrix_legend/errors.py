from __future__ import annotations


class LegendError(Exception):
    """Base error for legend configuration problems."""


class MarkerShapeError(LegendError):
    pass


class UnknownMarkerShapeError(MarkerShapeError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"unknown marker shape: {tag}")
        self.tag = tag


class MarkerShapeAlreadyRegisteredError(MarkerShapeError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"marker shape already registered: {tag}")
        self.tag = tag
