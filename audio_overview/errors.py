"""Error taxonomy for the audio overview pipeline.

Dropping an invalid citation or fact check is not an error and has no
class here.
"""


class AudioOverviewError(RuntimeError):
    """Base class for failures surfaced to the caller of the pipeline."""


class NoSources(AudioOverviewError):
    """Raised when the notebook has no sources; no network call is made."""

    def __init__(self, message: str = "No sources available in notebook."):
        super().__init__(message)


class MalformedResponse(AudioOverviewError):
    """JSON recovery exhausted every attempt; fatal for the current run."""

    def __init__(self, message: str, reason: str = ""):
        self.reason = reason
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class GenerationFailed(AudioOverviewError):
    """The generation service rejected a call or returned nothing usable."""
