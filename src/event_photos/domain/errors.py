"""Error taxonomy for event creation and guest uploads."""


class EventPhotosError(Exception):
    """Base error with a user-safe message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EventPhotosError):
    """Raised when an input fails validation."""


class NotFoundError(EventPhotosError):
    """Raised when an event id does not resolve to an event."""

    def __init__(self, event_id: str) -> None:
        super().__init__("Event not found")
        self.event_id = event_id


class AdmissionDeniedError(EventPhotosError):
    """Raised when an event refuses a guest upload."""


class UpstreamError(EventPhotosError):
    """Raised when the media store or a repository fails."""


class MediaUploadError(UpstreamError):
    """Raised when the media store cannot accept an image."""
