from __future__ import annotations

from .api_models import CheckStatus, DesiredState, ServiceRecord, ServiceStatus
from .compute import ComputeClient
from .log import log_event

DISABLED_REASON_PREFIX = "Disabled by Health action, because "
SUMMARY_TRIM = 100


def desired_state(status: CheckStatus, summary: str) -> DesiredState:
    """Map a check result to the administrative state of the service."""
    if status == CheckStatus.OK:
        return DesiredState(status=ServiceStatus.ENABLED)
    return DesiredState(
        status=ServiceStatus.DISABLED,
        disabled_reason=DISABLED_REASON_PREFIX + summary[:SUMMARY_TRIM],
    )


def reconcile(client: ComputeClient, service_id: str, status: CheckStatus, summary: str) -> ServiceRecord:
    """Apply the desired state with a single update.

    No read-before-write: setting a service to the state it already has is a
    plain update for the API, so repeated events are harmless.
    """
    desired = desired_state(status, summary)
    log_event("INFO", f"Apply action: {desired.status.value}", service_id=service_id)
    return client.update_service(service_id, desired)
