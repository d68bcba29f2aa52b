from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServiceStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class CheckStatus(str, Enum):
    OK = "OK"
    NON_OK = "NonOK"

    @classmethod
    def from_sensu(cls, status: int) -> "CheckStatus":
        # 0 ok, 1 warning, 2 critical, anything else unknown
        return cls.OK if status == 0 else cls.NON_OK


class ServiceQuery(BaseModel):
    host: str = Field(..., description="Host the service runs on")
    binary: str = Field(..., description="Service binary, e.g. nova-compute")

    def params(self) -> dict[str, str]:
        return {"binary": self.binary, "host": self.host}


class ServiceRecord(BaseModel):
    """One entry of the compute ``os-services`` listing."""

    model_config = ConfigDict(extra="ignore")

    id: str
    host: str = ""
    binary: str = ""
    status: ServiceStatus
    state: str | None = None
    zone: str | None = None
    disabled_reason: str | None = None
    forced_down: bool | None = None
    updated_at: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ServiceRecord":
        # ids are UUID strings from microversion 2.53 on; older clouds send ints
        return cls.model_validate({**data, "id": str(data.get("id", ""))})


class DesiredState(BaseModel):
    status: ServiceStatus
    disabled_reason: str | None = None

    def body(self) -> dict[str, str]:
        return self.model_dump(mode="json", exclude_none=True)


class HealthEvent(BaseModel):
    entity_name: str = ""
    check_name: str = ""
    check_status: CheckStatus
    check_summary: str = ""
    entity_annotations: dict[str, str] = Field(default_factory=dict)
    check_annotations: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_sensu(cls, event: dict[str, Any]) -> "HealthEvent":
        """Build from a Sensu Go event payload (as written to a handler's stdin)."""
        entity = event.get("entity") or {}
        check = event.get("check") or {}
        entity_meta = entity.get("metadata") or {}
        check_meta = check.get("metadata") or {}
        return cls(
            entity_name=entity_meta.get("name") or "",
            check_name=check_meta.get("name") or "",
            check_status=CheckStatus.from_sensu(int(check.get("status") or 0)),
            check_summary=(check.get("output") or "").strip(),
            entity_annotations=entity_meta.get("annotations") or {},
            check_annotations=check_meta.get("annotations") or {},
        )

    def annotations(self) -> dict[str, str]:
        """Entity annotations overridden by check annotations."""
        return {**self.entity_annotations, **self.check_annotations}
