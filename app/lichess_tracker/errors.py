class LichessError(Exception):
    """Base class for every failure raised while talking to the Lichess API."""


class ValidationError(LichessError):
    """The caller passed input that cannot be sent upstream. No request is made."""


class HttpError(LichessError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"HTTP error! status: {status}")


class NetworkError(LichessError):
    """The request never produced a response (DNS, connection reset, timeout...)."""


class DecodeError(LichessError):
    """The response body is not valid JSON."""
