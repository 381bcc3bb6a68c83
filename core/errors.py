"""Exceptions raised by the Drive and scanner layers."""


class ScannerError(Exception):
    """Base class for scanner failures."""


class AccessError(ScannerError):
    """A folder could not be resolved or read (permission denied, revoked)."""

    def __init__(self, folder_id: str, message: str = "access denied"):
        self.folder_id = folder_id
        self.message = message
        super().__init__(f"{folder_id}: {message}")


class NotFoundError(AccessError):
    """A folder id does not exist (or was deleted/trashed)."""

    def __init__(self, folder_id: str, message: str = "not found"):
        super().__init__(folder_id, message)
