from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from photonctl.models.common import ListResponse, ParsedState, PhotonModel


class EntityState(ParsedState):
    CREATING = "CREATING"
    RESIZING = "RESIZING"
    READY = "READY"
    ERROR = "ERROR"
    PENDING_DELETE = "PENDING_DELETE"
    MAINTENANCE = "MAINTENANCE"
    UNKNOWN = "UNKNOWN"


class Cluster(PhotonModel):
    id: str
    name: str | None = None
    type: str | None = None
    state: EntityState = EntityState.UNKNOWN
    workerCount: int = 0
    projectID: str | None = None
    extendedProperties: dict[str, Any] | None = None

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, value: Any) -> EntityState:
        return EntityState.parse(value)


class ClusterListResponse(ListResponse):
    items: list[Cluster] = Field(default_factory=list)


class ClusterCreateSpec(PhotonModel):
    """Normalized create spec for cluster creation.

    Example:
        >>> ClusterCreateSpec(name="k8s-1", type="KUBERNETES", worker_count=3)
    """

    name: str
    type: str = "KUBERNETES"
    worker_count: int = Field(default=1, ge=1)
    vm_flavor: str | None = None
    disk_flavor: str | None = None
    network_id: str | None = None
    image_id: str | None = None
    batch_size: int | None = Field(default=None, ge=1)
    extended_properties: dict[str, str] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type.upper(),
            "workerCount": self.worker_count,
            "extendedProperties": dict(self.extended_properties),
        }
        if self.vm_flavor:
            payload["vmFlavor"] = self.vm_flavor
        if self.disk_flavor:
            payload["diskFlavor"] = self.disk_flavor
        if self.network_id:
            payload["subnetId"] = self.network_id
        if self.image_id:
            payload["imageId"] = self.image_id
        if self.batch_size is not None:
            payload["workerBatchExpansionSize"] = self.batch_size
        return payload
