class VeriSightError(Exception):
    """Base class for errors raised by the data-access and service layers."""


class NotFoundError(VeriSightError):
    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class ConflictError(VeriSightError):
    pass


class VoteConflictError(ConflictError):
    """Vote could not be recorded after retrying unique-constraint conflicts."""


class InvalidStatField(VeriSightError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} is not an incrementable user stat")


class DetectionServiceError(VeriSightError):
    """The external classification API failed or returned something unusable."""

    def __init__(self, message: str = "Failed to analyze content", status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
