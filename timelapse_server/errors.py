"""Error taxonomy mapped onto HTTP statuses."""

from typing import Optional


class TimelapseError(Exception):
    """Base class for failures that surface to the client."""

    status_code: int = 500
    reason: str = "internal_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class FolderNotFound(TimelapseError):
    status_code = 404
    reason = "folder_not_found"


class EmptySelection(TimelapseError):
    status_code = 404
    reason = "no_matching_images"


class InvalidRange(TimelapseError):
    """Malformed date or time input."""

    status_code = 400
    reason = "invalid_range"


class InvalidTimeRange(TimelapseError):
    """Start is not strictly before end."""

    status_code = 400
    reason = "invalid_time_range"


class EncodingFailed(TimelapseError):
    status_code = 500
    reason = "encoding_failed"

    def __init__(self, exit_code: Optional[int], stderr_tail: str = ""):
        super().__init__(f"Encoder exited with code {exit_code}")
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail


class EncodingTimeout(TimelapseError):
    status_code = 504
    reason = "encoding_timeout"


class ArchiveWriteFailed(TimelapseError):
    status_code = 500
    reason = "archive_write_failed"
