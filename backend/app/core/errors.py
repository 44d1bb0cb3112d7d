from typing import Optional


class UpstreamError(Exception):
    """
    Base for failures talking to a third-party API.
    `source` names the upstream (e.g. "cheapshark"), `status_code` is the upstream
    HTTP status when there was one.
    """

    def __init__(self, source: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.message = message
        self.status_code = status_code


class UpstreamUnavailable(UpstreamError):
    """Network failure or non-2xx response."""


class NotFound(UpstreamError):
    """Upstream explicitly reported the resource as missing."""


class MalformedUpstream(UpstreamError):
    """Non-JSON body or an unexpected payload shape."""
