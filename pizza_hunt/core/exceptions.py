"""
Exception hierarchy for Pizza Hunt.
"""


class PizzaHuntError(Exception):
    """Base class for all Pizza Hunt errors."""


class DocumentStoreError(PizzaHuntError):
    """The document store could not be reached or rejected a command."""


class OfflineQueueError(PizzaHuntError):
    """The local offline queue could not be opened, read or written."""


class SyncError(PizzaHuntError):
    """A batch submission was rejected or could not be delivered."""


class SubmissionError(PizzaHuntError):
    """
    The server rejected a direct create request.

    Attributes:
        status_code: HTTP status returned by the server
        message: The server's error message, if it sent one
    """

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Server rejected pizza ({status_code}): {message}")
