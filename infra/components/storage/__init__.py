"""
Storage components.

Components:
- AuroraClusterComponent: Aurora MySQL cluster and its members
"""

from infra.components.storage.aurora_cluster import AuroraClusterComponent, AuroraOutputs

__all__ = [
    "AuroraClusterComponent",
    "AuroraOutputs",
]
