"""
Error types shared by the Emergent Ecology core.

Contradictions during wave function collapse are not represented here:
they are repaired in place by the solver and never raised.
"""


class InvalidArgument(ValueError):
    """Raised for invalid dimensions, step counts or an empty tile universe."""


class NotFound(KeyError):
    """Raised when a tile name or id is not present in a registry."""

    def __init__(self, key, message: str = ""):
        self.key = key
        super().__init__(message or f"Unknown tile: {key!r}")

    def __str__(self) -> str:
        return self.args[0]
