"""
Exceptions raised by the try-on pipeline.

Only InvalidEncoding reaches API callers (as a 400); the provider-side
errors are absorbed by the orchestrator and the pipeline.
"""


class TryOnError(Exception):
    """Base class for try-on pipeline errors."""


class InvalidEncoding(TryOnError):
    """An inline image payload is malformed or not a supported image format."""


class StorageUploadError(TryOnError):
    """Object storage rejected or failed an upload."""


class SubmissionError(TryOnError):
    """The try-on provider did not accept the job (no job id returned)."""


class ProviderTransportError(TryOnError):
    """A provider call failed at the transport level or returned a non-2xx status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class BackgroundRemovalError(TryOnError):
    """The background-removal provider failed."""
