"""
Configuration module for Pulumi infrastructure.

Provides type-safe configuration loading from Pulumi stack config files
and the validated network topology derived from it.
"""

from infra.configs.base import EnvironmentConfig
from infra.configs.environment import get_config
from infra.configs.constants import (
    VPC_CIDR,
    SUBNET_CIDRS,
    DEFAULT_TAGS,
    INSTANCE_TYPES,
)
from infra.configs.topology import NetworkTopology, TopologyError, build_topology

__all__ = [
    "EnvironmentConfig",
    "get_config",
    "VPC_CIDR",
    "SUBNET_CIDRS",
    "DEFAULT_TAGS",
    "INSTANCE_TYPES",
    "NetworkTopology",
    "TopologyError",
    "build_topology",
]
