from typing import Optional


class DeliveryAverageError(Exception):
    """Base de todos los errores del paquete."""


class InputUnavailableError(DeliveryAverageError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read input file {path!r}: {reason}" if reason else f"Cannot read input file {path!r}")


class MalformedEventError(DeliveryAverageError):
    def __init__(self, detail: str, line_no: Optional[int] = None):
        self.detail = detail
        self.line_no = line_no
        prefix = f"line {line_no}: " if line_no is not None else ""
        super().__init__(prefix + detail)


class MalformedTimestampError(MalformedEventError):
    def __init__(self, timestamp, line_no: Optional[int] = None):
        self.timestamp = timestamp
        super().__init__(f"Invalid timestamp {timestamp!r} (expected YYYY-MM-DD HH:MM:SS)", line_no)
