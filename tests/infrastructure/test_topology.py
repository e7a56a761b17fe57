"""
Tests for the network topology model.

Covers the default three-tier layout and every invariant checked before
resources are declared.
"""

from ipaddress import IPv4Network

import pytest
from pydantic import ValidationError

from infra.configs.topology import (
    NetworkTopology,
    RouteSpec,
    RouteTarget,
    SecurityGroupSpec,
    SecurityRuleSpec,
    SubnetSpec,
    SubnetTier,
    TopologyError,
    build_topology,
)


def _subnet(name: str, cidr: str, az: str, tier: SubnetTier) -> SubnetSpec:
    return SubnetSpec(name=name, cidr=cidr, availability_zone=az, tier=tier)


@pytest.fixture
def minimal_subnets() -> list[SubnetSpec]:
    return [
        _subnet("public", "10.0.1.0/24", "us-east-1a", SubnetTier.PUBLIC),
        _subnet("data", "10.0.21.0/24", "us-east-1a", SubnetTier.DATA),
        _subnet("data-b", "10.0.22.0/24", "us-east-1b", SubnetTier.DATA),
    ]


class TestDefaultTopology:
    """The layout produced by build_topology."""

    def test_tiers_and_zones(self, dev_config):
        topology = build_topology(dev_config)

        assert len(topology.subnets_in_tier(SubnetTier.PUBLIC)) == 2
        assert len(topology.subnets_in_tier(SubnetTier.APP)) == 2
        assert topology.availability_zones(SubnetTier.DATA) == {"us-east-1a", "us-east-1b"}

    def test_zones_follow_region(self, config_factory):
        topology = build_topology(config_factory(region="eu-west-1"))

        assert all(s.availability_zone.startswith("eu-west-1") for s in topology.subnets)

    def test_subnets_inside_vpc(self, dev_config):
        topology = build_topology(dev_config)

        assert topology.vpc_cidr == IPv4Network("10.0.0.0/16")
        assert all(s.cidr.subnet_of(topology.vpc_cidr) for s in topology.subnets)

    def test_routes(self, dev_config):
        topology = build_topology(dev_config)

        assert topology.public_routes == [
            RouteSpec(destination="0.0.0.0/0", target=RouteTarget.INTERNET_GATEWAY)
        ]
        assert topology.private_routes == [
            RouteSpec(destination="0.0.0.0/0", target=RouteTarget.NAT_GATEWAY)
        ]

    def test_database_only_reachable_from_web(self, dev_config):
        database = build_topology(dev_config).group("database")

        assert [rule.peer for rule in database.ingress] == ["web"]
        assert all(rule.cidr is None for rule in database.ingress)
        assert database.ingress[0].allows_port(3306)
        assert database.egress == []

    def test_web_http_open_to_world(self, dev_config):
        web = build_topology(dev_config).group("web")

        http_rules = [r for r in web.ingress if r.allows_port(80)]
        assert http_rules
        assert http_rules[0].cidr == IPv4Network("0.0.0.0/0")

    def test_ssh_rule_only_when_configured(self, dev_config, config_factory):
        without_ssh = build_topology(dev_config).group("web")
        with_ssh = build_topology(config_factory(ssh_ingress_cidr="198.51.100.0/24")).group("web")

        assert not any(r.allows_port(22) for r in without_ssh.ingress)
        ssh = [r for r in with_ssh.ingress if r.from_port == 22]
        assert len(ssh) == 1
        assert ssh[0].cidr == IPv4Network("198.51.100.0/24")

    def test_bad_ssh_cidr_rejected(self, config_factory):
        with pytest.raises(ValidationError):
            build_topology(config_factory(ssh_ingress_cidr="not-a-cidr"))

    def test_unknown_group_lookup(self, dev_config):
        with pytest.raises(KeyError):
            build_topology(dev_config).group("cache")


class TestSecurityRuleSpec:
    """Field-level validation of security rules."""

    def test_requires_exactly_one_source(self):
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="ingress", from_port=80, to_port=80)
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="ingress", from_port=80, to_port=80, cidr="0.0.0.0/0", peer="web")

    def test_port_range_order(self):
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="ingress", from_port=90, to_port=80, cidr="0.0.0.0/0")

    def test_port_bounds(self):
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="ingress", from_port=0, to_port=70000, cidr="0.0.0.0/0")

    def test_tcp_requires_ports(self):
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="ingress", cidr="0.0.0.0/0")

    def test_all_traffic_rejects_ports(self):
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="egress", protocol="-1", from_port=0, to_port=0, cidr="0.0.0.0/0")

    def test_all_traffic_allows_any_port(self):
        rule = SecurityRuleSpec(direction="egress", protocol="-1", cidr="0.0.0.0/0")

        assert rule.allows_port(5432)

    def test_port_range_membership(self):
        rule = SecurityRuleSpec(direction="ingress", from_port=8000, to_port=8080, peer="web")

        assert rule.allows_port(8000)
        assert rule.allows_port(8080)
        assert not rule.allows_port(8081)

    def test_host_bits_rejected(self):
        with pytest.raises(ValidationError):
            SecurityRuleSpec(direction="ingress", from_port=80, to_port=80, cidr="10.0.0.5/16")


class TestTopologyInvariants:
    """Cross-entity checks in NetworkTopology.ensure_consistent."""

    def test_minimal_topology_is_consistent(self, minimal_subnets):
        topology = NetworkTopology(vpc_cidr="10.0.0.0/16", subnets=minimal_subnets)

        assert topology.ensure_consistent() is topology

    def test_subnet_outside_vpc(self, minimal_subnets):
        minimal_subnets.append(_subnet("stray", "192.168.0.0/24", "us-east-1a", SubnetTier.APP))

        with pytest.raises(TopologyError, match="outside VPC"):
            NetworkTopology(vpc_cidr="10.0.0.0/16", subnets=minimal_subnets).ensure_consistent()

    def test_overlapping_subnets(self, minimal_subnets):
        minimal_subnets.append(_subnet("app", "10.0.1.128/25", "us-east-1a", SubnetTier.APP))

        with pytest.raises(TopologyError, match="overlap"):
            NetworkTopology(vpc_cidr="10.0.0.0/16", subnets=minimal_subnets).ensure_consistent()

    def test_duplicate_subnet_names(self, minimal_subnets):
        minimal_subnets.append(_subnet("public", "10.0.2.0/24", "us-east-1b", SubnetTier.PUBLIC))

        with pytest.raises(TopologyError, match="Duplicate"):
            NetworkTopology(vpc_cidr="10.0.0.0/16", subnets=minimal_subnets).ensure_consistent()

    def test_data_tier_needs_two_zones(self):
        subnets = [
            _subnet("public", "10.0.1.0/24", "us-east-1a", SubnetTier.PUBLIC),
            _subnet("data", "10.0.21.0/24", "us-east-1a", SubnetTier.DATA),
            _subnet("data-b", "10.0.22.0/24", "us-east-1a", SubnetTier.DATA),
        ]

        with pytest.raises(TopologyError, match="two availability zones"):
            NetworkTopology(vpc_cidr="10.0.0.0/16", subnets=subnets).ensure_consistent()

    def test_public_subnet_required(self):
        subnets = [
            _subnet("data", "10.0.21.0/24", "us-east-1a", SubnetTier.DATA),
            _subnet("data-b", "10.0.22.0/24", "us-east-1b", SubnetTier.DATA),
        ]

        with pytest.raises(TopologyError, match="public subnet"):
            NetworkTopology(vpc_cidr="10.0.0.0/16", subnets=subnets).ensure_consistent()

    def test_public_route_must_use_igw(self, minimal_subnets):
        topology = NetworkTopology(
            vpc_cidr="10.0.0.0/16",
            subnets=minimal_subnets,
            public_routes=[RouteSpec(destination="0.0.0.0/0", target=RouteTarget.NAT_GATEWAY)],
        )

        with pytest.raises(TopologyError, match="internet gateway"):
            topology.ensure_consistent()

    def test_dangling_peer_reference(self, minimal_subnets):
        topology = NetworkTopology(
            vpc_cidr="10.0.0.0/16",
            subnets=minimal_subnets,
            security_groups=[
                SecurityGroupSpec(
                    name="database",
                    description="db",
                    rules=[SecurityRuleSpec(direction="ingress", from_port=3306, to_port=3306, peer="app")],
                ),
            ],
        )

        with pytest.raises(TopologyError, match="unknown peer 'app'"):
            topology.ensure_consistent()

    def test_duplicate_group_names(self, minimal_subnets):
        topology = NetworkTopology(
            vpc_cidr="10.0.0.0/16",
            subnets=minimal_subnets,
            security_groups=[
                SecurityGroupSpec(name="web", description="one"),
                SecurityGroupSpec(name="web", description="two"),
            ],
        )

        with pytest.raises(TopologyError, match="unique"):
            topology.ensure_consistent()

    def test_topology_error_is_value_error(self):
        assert issubclass(TopologyError, ValueError)
