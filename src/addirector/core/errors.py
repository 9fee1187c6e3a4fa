"""Exception hierarchy for the ad generation pipeline.

Every failure the pipeline surfaces derives from :class:`AdDirectorError`, and
its ``str()`` is the message shown to the user.

    AdDirectorError
    ├── InputValidationError   rejected before any stage runs
    ├── ProviderError          the provider binding got nothing usable back
    ├── StageError             a stage failed; the run is aborted
    │   └── VideoJobError      the video job failed, returned nothing or timed out
    └── CredentialError        the API credential is missing or invalid
"""

import logging

logger = logging.getLogger(__name__)

CREDENTIAL_ERROR_MESSAGE = (
    "API Key not found or invalid. Please select a valid API key and try again."
)

# Literal fragment the Gemini API puts in "entity not found" replies. Only used
# when the error does not carry a status code.
ENTITY_NOT_FOUND_FRAGMENT = "Requested entity was not found"


class AdDirectorError(Exception):
    """Base class for all pipeline errors."""


class InputValidationError(AdDirectorError):
    """The user input is incomplete or invalid. No stage has run."""


class ProviderError(AdDirectorError):
    """The capability provider returned no usable payload."""


class StageError(AdDirectorError):
    """A pipeline stage failed.

    Attributes:
        stage: Name of the failing stage (e.g. ``"concept"``)
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


class VideoJobError(StageError):
    """The asynchronous video job finished without a usable video."""

    def __init__(self, message: str) -> None:
        super().__init__("video", message)


class CredentialError(AdDirectorError):
    """The provider rejected the API credential."""

    def __init__(self, message: str = CREDENTIAL_ERROR_MESSAGE) -> None:
        super().__init__(message)


def is_credential_error(exc: BaseException) -> bool:
    """Check whether an exception signals a missing or invalid credential.

    ``google.genai`` API errors carry the HTTP status in ``code``. A 404 on a
    call whose model and operation names come from configuration means the
    key cannot see the resource. The message fragment check is a fallback for
    errors raised without a code.

    Args:
        exc: Any exception raised by a provider call

    Returns:
        True if the exception should be reported as a credential problem
    """
    if isinstance(exc, CredentialError):
        return True
    if getattr(exc, "code", None) == 404:
        return True
    return ENTITY_NOT_FOUND_FRAGMENT in str(exc)


def classify_provider_error(exc: BaseException, stage: str) -> AdDirectorError:
    """Map an exception raised during a stage to the error the run reports.

    - Credential problems become :class:`CredentialError`.
    - Pipeline errors pass through unchanged.
    - Anything else becomes a :class:`StageError` carrying the original message.

    Args:
        exc: The exception raised inside the stage
        stage: Name of the stage that was running

    Returns:
        The exception to raise from the run
    """
    if is_credential_error(exc):
        logger.warning(f"Credential rejected during stage '{stage}': {exc}")
        return CredentialError()
    if isinstance(exc, StageError):
        return exc
    if isinstance(exc, AdDirectorError):
        return StageError(stage, str(exc))

    message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    return StageError(stage, message)
