"""Session-level misuse errors. The API maps these to 409 / 404."""


class SessionError(Exception):
    """Base class for errors raised by a LivingHistorySession."""


class SessionBusyError(SessionError):
    """A text request (navigation, era change, divergence, custom event) is in flight."""


class UnknownEntityError(SessionError):
    """An event, NPC, map location or session id is not known."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"Unknown {kind}: {entity_id}")


class SessionNotStartedError(SessionError):
    """The operation needs an era, and none has been selected yet."""
