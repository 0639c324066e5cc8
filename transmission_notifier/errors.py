from __future__ import annotations

"""Exception types shared by the submission path and the wait-list monitor."""


class NotifierError(Exception):
    """Base class for every error raised by transmission_notifier."""


class SubmissionError(NotifierError):
    """A torrent could not be resolved, added, or registered. Nothing was stored."""


class PollingError(NotifierError):
    """Transmission could not be queried during a reconciliation pass."""


class StoreError(NotifierError):
    """The wait-list store (Redis) is unreachable or answered with an error."""


class UnknownStatusError(NotifierError, ValueError):
    """Transmission reported a status ordinal we have no name for."""

    def __init__(self, status: object) -> None:
        super().__init__(f"Unknown torrent status: {status!r}")
        self.status = status
