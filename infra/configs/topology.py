"""
Network topology model for the tiered VPC stack.

Describes the desired layout (subnets, routes, security groups) as pydantic
models before any Pulumi resource is declared. Field-level problems surface
as pydantic ValidationError; cross-entity problems (overlapping CIDRs, a
single-AZ data tier, dangling peer references) raise TopologyError.

Three Tiers:
1. Public: routes 0.0.0.0/0 to the Internet Gateway. Hosts the web instance and the NAT gateway.
2. App: private, routes 0.0.0.0/0 to the NAT gateway (outbound only).
3. Data: private, same route table as App. Must span two AZs for the RDS subnet group.
"""

from enum import Enum
from ipaddress import IPv4Network
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from infra.configs.base import EnvironmentConfig
from infra.configs.constants import (
    ANYWHERE_CIDR,
    AZ_SUFFIXES,
    PORTS,
    SUBNET_CIDRS,
    VPC_CIDR,
    VPC_TENANCY,
)


class TopologyError(ValueError):
    """Raised when the declared topology violates a cross-resource invariant."""


class SubnetTier(str, Enum):
    PUBLIC = "public"
    APP = "app"
    DATA = "data"


class RouteTarget(str, Enum):
    INTERNET_GATEWAY = "internet_gateway"
    NAT_GATEWAY = "nat_gateway"


class SubnetSpec(BaseModel):
    """A partition of the VPC address range bound to one availability zone."""

    name: str = Field(..., min_length=1, max_length=64)
    cidr: IPv4Network
    availability_zone: str = Field(..., min_length=1)
    tier: SubnetTier

    @property
    def is_public(self) -> bool:
        return self.tier == SubnetTier.PUBLIC


class RouteSpec(BaseModel):
    """Destination CIDR and the gateway kind it is sent to."""

    destination: IPv4Network
    target: RouteTarget


class SecurityRuleSpec(BaseModel):
    """
    One allow rule of a security group.

    A rule has exactly one source: an address range (cidr) or another
    security group referenced by name (peer). Protocol "-1" means all
    traffic and carries no port range.
    """

    direction: Literal["ingress", "egress"]
    protocol: Literal["tcp", "udp", "-1"] = "tcp"
    from_port: int | None = Field(None, ge=0, le=65535)
    to_port: int | None = Field(None, ge=0, le=65535)
    cidr: IPv4Network | None = None
    peer: str | None = None
    description: str = ""

    @model_validator(mode="after")
    def _check_source_and_ports(self) -> "SecurityRuleSpec":
        if (self.cidr is None) == (self.peer is None):
            raise ValueError("rule needs exactly one of 'cidr' or 'peer'")

        if self.protocol == "-1":
            if self.from_port is not None or self.to_port is not None:
                raise ValueError("all-traffic rules must not set ports")
            return self

        if self.from_port is None or self.to_port is None:
            raise ValueError(f"{self.protocol} rules require from_port and to_port")
        if self.from_port > self.to_port:
            raise ValueError(f"from_port {self.from_port} is greater than to_port {self.to_port}")
        return self

    def allows_port(self, port: int) -> bool:
        """Check whether the rule's port range covers a port."""
        if self.protocol == "-1":
            return True
        return self.from_port <= port <= self.to_port


class SecurityGroupSpec(BaseModel):
    """Stateful allow-list attached to compute or database resources."""

    name: str = Field(..., min_length=1, max_length=64)
    description: str
    rules: list[SecurityRuleSpec] = Field(default_factory=list)

    @property
    def ingress(self) -> list[SecurityRuleSpec]:
        return [rule for rule in self.rules if rule.direction == "ingress"]

    @property
    def egress(self) -> list[SecurityRuleSpec]:
        return [rule for rule in self.rules if rule.direction == "egress"]


class NetworkTopology(BaseModel):
    """Complete desired network layout for one stack."""

    vpc_cidr: IPv4Network
    tenancy: Literal["default", "dedicated"] = "default"
    subnets: list[SubnetSpec]
    public_routes: list[RouteSpec] = Field(default_factory=list)
    private_routes: list[RouteSpec] = Field(default_factory=list)
    security_groups: list[SecurityGroupSpec] = Field(default_factory=list)

    def subnets_in_tier(self, tier: SubnetTier) -> list[SubnetSpec]:
        """Get subnets of a tier in declaration order."""
        return [subnet for subnet in self.subnets if subnet.tier == tier]

    def availability_zones(self, tier: SubnetTier) -> set[str]:
        """Get the distinct availability zones covered by a tier."""
        return {subnet.availability_zone for subnet in self.subnets_in_tier(tier)}

    def group(self, name: str) -> SecurityGroupSpec:
        """Look up a security group by name."""
        for group in self.security_groups:
            if group.name == name:
                return group
        raise KeyError(name)

    def ensure_consistent(self) -> "NetworkTopology":
        """
        Check invariants that span several entities.

        Returns:
            The topology itself, for chaining

        Raises:
            TopologyError: On the first violated invariant
        """
        names = [subnet.name for subnet in self.subnets]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise TopologyError(f"Duplicate subnet names: {', '.join(duplicates)}")

        for subnet in self.subnets:
            if not subnet.cidr.subnet_of(self.vpc_cidr):
                raise TopologyError(
                    f"Subnet {subnet.name} ({subnet.cidr}) is outside VPC range {self.vpc_cidr}"
                )

        for i, first in enumerate(self.subnets):
            for second in self.subnets[i + 1:]:
                if first.cidr.overlaps(second.cidr):
                    raise TopologyError(
                        f"Subnets {first.name} ({first.cidr}) and {second.name} ({second.cidr}) overlap"
                    )

        if not self.subnets_in_tier(SubnetTier.PUBLIC):
            raise TopologyError("At least one public subnet is required to host the NAT gateway")

        data_zones = self.availability_zones(SubnetTier.DATA)
        if len(data_zones) < 2:
            raise TopologyError(
                "Database subnet group must span at least two availability zones, "
                f"got {sorted(data_zones) or 'none'}"
            )

        for route in self.public_routes:
            if route.target != RouteTarget.INTERNET_GATEWAY:
                raise TopologyError(f"Public route {route.destination} must target the internet gateway")

        group_names = [group.name for group in self.security_groups]
        if len(group_names) != len(set(group_names)):
            raise TopologyError("Security group names must be unique")

        for group in self.security_groups:
            for rule in group.rules:
                if rule.peer is not None and rule.peer not in group_names:
                    raise TopologyError(
                        f"Security group {group.name} references unknown peer '{rule.peer}'"
                    )

        return self


def build_topology(config: EnvironmentConfig) -> NetworkTopology:
    """
    Build the default three-tier topology for an environment.

    Args:
        config: Environment configuration (region drives AZ names)

    Returns:
        NetworkTopology: Validated topology

    Raises:
        pydantic.ValidationError: If a field is malformed
        TopologyError: If cross-resource invariants do not hold
    """
    az_a, az_b = (f"{config.region}{suffix}" for suffix in AZ_SUFFIXES)

    subnets = [
        SubnetSpec(name="public", cidr=SUBNET_CIDRS["public"], availability_zone=az_a, tier=SubnetTier.PUBLIC),
        SubnetSpec(name="public-b", cidr=SUBNET_CIDRS["public_b"], availability_zone=az_b, tier=SubnetTier.PUBLIC),
        SubnetSpec(name="app", cidr=SUBNET_CIDRS["app"], availability_zone=az_a, tier=SubnetTier.APP),
        SubnetSpec(name="app-b", cidr=SUBNET_CIDRS["app_b"], availability_zone=az_b, tier=SubnetTier.APP),
        SubnetSpec(name="data", cidr=SUBNET_CIDRS["data"], availability_zone=az_a, tier=SubnetTier.DATA),
        SubnetSpec(name="data-b", cidr=SUBNET_CIDRS["data_b"], availability_zone=az_b, tier=SubnetTier.DATA),
    ]

    web_rules = [
        SecurityRuleSpec(
            direction="ingress",
            from_port=PORTS["http"],
            to_port=PORTS["http"],
            cidr=ANYWHERE_CIDR,
            description="HTTP from anywhere",
        ),
        SecurityRuleSpec(
            direction="ingress",
            from_port=PORTS["https"],
            to_port=PORTS["https"],
            cidr=ANYWHERE_CIDR,
            description="HTTPS from anywhere",
        ),
        SecurityRuleSpec(
            direction="egress",
            protocol="-1",
            cidr=ANYWHERE_CIDR,
            description="All outbound traffic",
        ),
    ]
    if config.ssh_ingress_cidr:
        web_rules.insert(2, SecurityRuleSpec(
            direction="ingress",
            from_port=PORTS["ssh"],
            to_port=PORTS["ssh"],
            cidr=config.ssh_ingress_cidr,
            description="SSH from operator range",
        ))

    database_rules = [
        SecurityRuleSpec(
            direction="ingress",
            from_port=PORTS["mysql"],
            to_port=PORTS["mysql"],
            peer="web",
            description="MySQL from web tier",
        ),
    ]

    topology = NetworkTopology(
        vpc_cidr=VPC_CIDR,
        tenancy=VPC_TENANCY,
        subnets=subnets,
        public_routes=[RouteSpec(destination=ANYWHERE_CIDR, target=RouteTarget.INTERNET_GATEWAY)],
        private_routes=[RouteSpec(destination=ANYWHERE_CIDR, target=RouteTarget.NAT_GATEWAY)],
        security_groups=[
            SecurityGroupSpec(name="web", description="Web tier: HTTP/HTTPS from the internet", rules=web_rules),
            SecurityGroupSpec(name="database", description="Data tier: MySQL from web tier only", rules=database_rules),
        ],
    )
    return topology.ensure_consistent()
