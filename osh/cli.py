from __future__ import annotations

import json
import sys

from pydantic import ValidationError

from .api_models import HealthEvent
from .errors import HandlerError
from .handler import run
from .log import log_event, setup_logging
from .settings import apply_annotations, load_settings


def read_event(stream) -> HealthEvent:
    try:
        return HealthEvent.from_sensu(json.load(stream))
    except (ValueError, TypeError, AttributeError, ValidationError) as e:
        raise HandlerError(f"failed to read the event from stdin: {e}") from e


def main(argv: list[str] | None = None, stdin=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        settings = load_settings(argv)
        setup_logging(settings.debug)
        event = read_event(stdin or sys.stdin)
        settings = apply_annotations(settings, event.annotations())
        record = run(event, settings)
    except HandlerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log_event("INFO", f"Service is {record.status.value}", host=record.host, service_id=record.id)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
