"""Error taxonomy for the redirect directory.

Only infrastructural failures are exceptions. Business-expected absence
(a slug with no entry) is modelled as None, and record-level problems
(malformed records, invalid coordinates) are counted or degraded, never
raised.
"""


class DirectoryError(Exception):
    """Base class for redirect directory errors."""


class StoreUnavailable(DirectoryError):
    """The backing store could not be reached or timed out.

    Aborts the current query. Not retried inside the directory; retry
    policy belongs to the HTTP layer.
    """

    def __init__(self, message: str, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend
