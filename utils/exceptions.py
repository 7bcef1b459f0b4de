"""Custom exception classes used across the service."""


class ServiceError(RuntimeError):
    """Base class for domain-specific exceptions."""


class InvalidRequestError(ServiceError):
    """Raised when request validation fails."""


class NotFoundError(ServiceError):
    """Raised when a job or artifact does not exist (or has expired)."""


class JobStateError(ServiceError):
    """Raised when a job is moved along an illegal status transition."""


class ExtractionError(ServiceError):
    """Raised when audio extraction fails."""


class ToolInvocationError(ExtractionError):
    """Raised when the external extraction tool times out or exits nonzero."""


class TranscriptionError(ServiceError):
    """Raised when audio transcription fails."""


class UploadError(TranscriptionError):
    """Raised when the audio could not be uploaded to the provider."""


class ProviderError(TranscriptionError):
    """Raised when the provider reports an error."""


class TranscriptionTimeoutError(TranscriptionError):
    """Raised when the provider does not finish within the polling budget."""
