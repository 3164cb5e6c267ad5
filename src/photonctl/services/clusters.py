from __future__ import annotations

from urllib.parse import quote

from photonctl.models.clusters import Cluster, ClusterCreateSpec, ClusterListResponse
from photonctl.models.tasks import Task
from photonctl.services.base import ServiceBase


def _segment(value: str) -> str:
    return quote(value, safe="")


class ClustersService(ServiceBase):
    """Cluster operations. Every mutating call returns the server-side task."""

    async def get(self, cluster_id: str) -> Cluster:
        data = await self._client._request_json("GET", f"/clusters/{_segment(cluster_id)}")
        return self._parse(Cluster, data)

    async def list(self, project_id: str) -> ClusterListResponse:
        data = await self._client._request_json("GET", f"/projects/{_segment(project_id)}/clusters")
        return self._parse(ClusterListResponse, data)

    async def create(self, project_id: str, spec: ClusterCreateSpec) -> Task:
        data = await self._client._request_json(
            "POST",
            f"/projects/{_segment(project_id)}/clusters",
            json_data=spec.to_payload(),
        )
        return self._parse(Task, data)

    async def resize(self, cluster_id: str, worker_count: int) -> Task:
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")
        data = await self._client._request_json(
            "POST",
            f"/clusters/{_segment(cluster_id)}/resize",
            json_data={"newWorkerCount": worker_count},
        )
        return self._parse(Task, data)

    async def delete(self, cluster_id: str) -> Task:
        data = await self._client._request_json("DELETE", f"/clusters/{_segment(cluster_id)}")
        return self._parse(Task, data)

    async def trigger_maintenance(self, cluster_id: str) -> Task:
        data = await self._client._request_json(
            "POST",
            f"/clusters/{_segment(cluster_id)}/trigger_maintenance",
        )
        return self._parse(Task, data)
