from photonctl.services.clusters import ClustersService
from photonctl.services.tasks import TasksService

__all__ = [
    "ClustersService",
    "TasksService",
]
