"""
Networking components for VPC infrastructure.

Components:
- VpcComponent: VPC with tiered subnets, IGW, NAT gateway, route tables
- SecurityGroupsComponent: Security groups and rules for web and database tiers
"""

from infra.components.networking.vpc import VpcComponent, VpcOutputs
from infra.components.networking.security_groups import SecurityGroupsComponent, SecurityGroupOutputs

__all__ = [
    "VpcComponent",
    "VpcOutputs",
    "SecurityGroupsComponent",
    "SecurityGroupOutputs",
]
