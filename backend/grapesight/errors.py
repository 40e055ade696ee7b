"""Exception hierarchy.

A rejected image is a normal outcome (``RunState.REJECTED``), not an
exception, and stale responses are dropped without ever being raised.
"""

from __future__ import annotations


class GrapeSightError(Exception):
    """Base class for all GrapeSight errors."""


class TransportFailure(GrapeSightError):
    """A remote inference call failed: network error, non-2xx status or bad payload."""

    def __init__(self, stage: str, detail: str) -> None:
        self.stage = stage
        self.detail = detail
        super().__init__(f"{stage} request failed: {detail}")


class UnknownDiseaseClass(GrapeSightError, KeyError):
    """The classifier returned a class name missing from the disease table."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unrecognized disease class: {self.name!r}"


class UnsupportedImageType(GrapeSightError, ValueError):
    """An upload's content type is not in the accepted set."""

    def __init__(self, content_type: str, accepted: list[str]) -> None:
        self.content_type = content_type
        self.accepted = accepted
        super().__init__(
            f"Unsupported image type {content_type!r} (accepted: {', '.join(accepted)})"
        )


class InvalidStepTransition(GrapeSightError, RuntimeError):
    """A simulation step transition outside the allowed set was attempted."""
