"""Exceptions raised across the puzzlesync package.

Protocol misuse (rotating someone else's finished puzzle, starting without an
image) is deliberately *not* an exception: those calls are silent no-ops.
These classes cover input that cannot be understood at all and failures of
the asset storage collaborator.
"""


class PuzzleSyncError(Exception):
    """Base class for puzzlesync errors."""


class MalformedMessage(PuzzleSyncError):
    """An inbound socket payload could not be parsed into a known message."""

    def __init__(self, event, reason):
        super().__init__(f"{event}: {reason}")
        self.event = event
        self.reason = reason


class AssetStorageError(PuzzleSyncError):
    """The asset store could not save an upload."""
