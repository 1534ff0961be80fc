"""Failure kinds raised by the AI gateway layer.

Everything the gateway raises derives from GatewayError, so callers at the
orchestration boundary can catch one type and substitute their fallback.
"""


class GatewayError(Exception):
    """A generative-service call failed (transport, credential, or payload)."""


class StructuredResponseError(GatewayError):
    """The reply was empty, not JSON, or did not match the declared schema."""


class MediaGenerationTimeout(GatewayError):
    """A long-running media job exceeded its poll budget or wall-clock timeout."""

    def __init__(self, label: str, attempts: int, elapsed: float | None = None):
        self.label = label
        self.attempts = attempts
        self.elapsed = elapsed
        detail = f"{label}: generation timed out after {attempts} poll(s)"
        if elapsed is not None:
            detail += f" / {elapsed:.0f}s"
        super().__init__(detail)
