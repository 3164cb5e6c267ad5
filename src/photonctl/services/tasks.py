from __future__ import annotations

from urllib.parse import quote

from photonctl.models.tasks import Task, TaskListResponse
from photonctl.services.base import ServiceBase


class TasksService(ServiceBase):
    """Task lookups."""

    async def get(self, task_id: str) -> Task:
        data = await self._client._request_json("GET", f"/tasks/{quote(task_id, safe='')}")
        return self._parse(Task, data)

    async def list(
        self,
        *,
        entity_id: str | None = None,
        entity_kind: str | None = None,
        state: str | None = None,
    ) -> TaskListResponse:
        params = {
            "entityId": entity_id or "",
            "entityKind": entity_kind or "",
            "state": state.upper() if state else "",
        }
        data = await self._client._request_json("GET", "/tasks", params=params)
        return self._parse(TaskListResponse, data)
