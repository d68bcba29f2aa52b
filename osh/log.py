from __future__ import annotations

import logging
import sys

LOG = logging.getLogger("osh")

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(debug: bool = False) -> None:
    """Send handler logs to stderr; stdout is left to Sensu."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    LOG.handlers[:] = [handler]
    LOG.setLevel(logging.DEBUG if debug else logging.INFO)


def log_event(level: str, message: str, host: str | None = None, service_id: str | None = None) -> None:
    context = []
    if host:
        context.append(f"host={host}")
    if service_id:
        context.append(f"service_id={service_id}")
    if context:
        message = f"{message} [{' '.join(context)}]"
    LOG.log(_LEVELS.get(level.upper(), logging.INFO), message)
