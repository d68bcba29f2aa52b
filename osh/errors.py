from __future__ import annotations


class HandlerError(Exception):
    """Base class for every failure that aborts an invocation."""


class ConfigurationError(HandlerError):
    """Bad or missing configuration; raised before any remote mutation."""


class ResolutionError(HandlerError):
    """No compute service record matched the query."""


class TransportError(HandlerError):
    """Network, authentication, timeout or HTTP failure talking to the cloud."""


class UpdateError(HandlerError):
    """The control plane rejected the service update."""

    def __init__(self, service_id: str, message: str):
        super().__init__(message)
        self.service_id = service_id
