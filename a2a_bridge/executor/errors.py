"""Executor errors."""

__all__ = ["A2ABridgeError", "UnsupportedItemKindError"]


class A2ABridgeError(Exception):
    """Base class for bridge errors."""


class UnsupportedItemKindError(A2ABridgeError):
    """Run item kind the bridge does not translate (e.g. computer calls). Aborts the run."""

    def __init__(self, item_type: str, raw_type: str) -> None:
        self.item_type = item_type
        self.raw_type = raw_type
        super().__init__(f"{item_type} type `{raw_type}` is not supported.")
