from photonctl.models.clusters import Cluster, ClusterCreateSpec, ClusterListResponse, EntityState
from photonctl.models.common import EntityRef, ParsedState, PhotonModel
from photonctl.models.tasks import ApiErrorDetail, Step, Task, TaskListResponse, TaskState

__all__ = [
    "ApiErrorDetail",
    "Cluster",
    "ClusterCreateSpec",
    "ClusterListResponse",
    "EntityRef",
    "EntityState",
    "ParsedState",
    "PhotonModel",
    "Step",
    "Task",
    "TaskListResponse",
    "TaskState",
]
