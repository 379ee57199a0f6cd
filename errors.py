class HubError(Exception):
    """Base class for errors raised by the signaling core."""


class AdmissionError(HubError):
    """Connection refused before entering the core (missing, malformed or rejected credential)."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidRequest(HubError):
    """Malformed client message. Ignored by the coordinator."""


class RelayDropped(HubError):
    """Signaling message not deliverable (unknown target or cross-room)."""
