"""Control-plane object store access."""

from .base import ControlPlaneStore
from .kubernetes import ClusterContext, KubernetesStore
from .models import ConfigMap, ConfigMapList, ListMeta, ObjectMeta, Secret

__all__ = [
    "ControlPlaneStore",
    "ClusterContext",
    "KubernetesStore",
    "ConfigMap",
    "ConfigMapList",
    "ListMeta",
    "ObjectMeta",
    "Secret",
]
