"""Task-completion and resource-readiness waiters."""

from photonctl.waiters.progress import EntityProgress, ProgressIndicator, TaskProgress, running
from photonctl.waiters.readiness import ReadinessWaiter, wait_for_entity_ready
from photonctl.waiters.tasks import TaskWaiter, wait_for_task, wait_for_task_completion

__all__ = [
    "EntityProgress",
    "ProgressIndicator",
    "ReadinessWaiter",
    "TaskProgress",
    "TaskWaiter",
    "running",
    "wait_for_entity_ready",
    "wait_for_task",
    "wait_for_task_completion",
]
