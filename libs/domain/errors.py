from __future__ import annotations


class SnapError(Exception):
    """Base for every fatal capture failure."""


class RemoteCommandError(SnapError):
    """The remote execution transport itself failed (connect, timeout)."""


class ProcessNotFound(SnapError):
    pass


class MappingNotFound(SnapError):
    pass


class AddressParseError(SnapError):
    pass


class IncompleteCapture(SnapError):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"expected {expected} bytes from framebuffer, got {got}")
        self.expected = expected
        self.got = got


class DecodeFailure(SnapError):
    pass


__all__ = [
    "SnapError",
    "RemoteCommandError",
    "ProcessNotFound",
    "MappingNotFound",
    "AddressParseError",
    "IncompleteCapture",
    "DecodeFailure",
]
