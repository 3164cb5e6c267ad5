from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from photonctl.models.common import EntityRef, ListResponse, ParsedState, PhotonModel


class TaskState(ParsedState):
    QUEUED = "QUEUED"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.ERROR)


class ApiErrorDetail(PhotonModel):
    code: str | None = None
    message: str | None = None
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        if self.code and self.message:
            return f"{self.code}: {self.message}"
        return self.code or self.message or "unknown error"


class Step(PhotonModel):
    sequence: int = 0
    operation: str | None = None
    state: TaskState = TaskState.UNKNOWN
    startedTime: int = 0
    endTime: int = 0
    errors: list[ApiErrorDetail] = Field(default_factory=list)
    warnings: list[ApiErrorDetail] = Field(default_factory=list)

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, value: Any) -> TaskState:
        return TaskState.parse(value)

    @field_validator("errors", "warnings", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class Task(PhotonModel):
    """Snapshot of a server-side asynchronous operation."""

    id: str
    operation: str | None = None
    state: TaskState = TaskState.UNKNOWN
    entity: EntityRef = Field(default_factory=EntityRef)
    steps: list[Step] = Field(default_factory=list)
    queuedTime: int = 0
    startedTime: int = 0
    endTime: int = 0
    resourceProperties: Any = None
    selfLink: str | None = None

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, value: Any) -> TaskState:
        return TaskState.parse(value)

    @field_validator("steps", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def api_errors(self) -> list[ApiErrorDetail]:
        errors: list[ApiErrorDetail] = []
        for step in sorted(self.steps, key=lambda item: item.sequence):
            errors.extend(step.errors)
        return errors

    def started_step(self) -> Step | None:
        for step in self.steps:
            if step.state is TaskState.STARTED:
                return step
        return None


class TaskListResponse(ListResponse):
    items: list[Task] = Field(default_factory=list)
