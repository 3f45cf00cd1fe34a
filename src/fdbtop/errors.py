"""Exceptions raised by the fdbtop refresh pipeline."""


class FdbtopError(Exception):
    """Base class for fdbtop errors."""


class MalformedSnapshot(FdbtopError):
    """The status text is not a status document with a process map."""


class MalformedAddress(FdbtopError):
    """A process address has no host:port separator."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Address has no port separator: {address!r}")
        self.address = address


class FetchFailure(FdbtopError):
    """The status command failed, timed out, or could not be started."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output
