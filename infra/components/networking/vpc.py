"""
VPC Component Resource for Network Infrastructure.

Steps & Architecture:
1. VPC (10.0.0.0/16): Defines the isolated network container and its tenancy.
2. Internet Gateway (IGW): the "door" to the internet for the public tier.
3. Subnets (one per topology entry, each bound to one AZ):
   - Public: web instance and NAT gateway. Public IPs mapped on launch.
   - App: private application tier.
   - Data: database cluster members (two AZs, required by the DB subnet group).
4. NAT Gateway: lives in the first public subnet with an Elastic IP. Gives private tiers outbound-only access.
5. Route Tables:
   - Public RT: 0.0.0.0/0 -> IGW.
   - Private RT: 0.0.0.0/0 -> NAT. Inbound connections from the internet have no path in.
6. Associations: every subnet is explicitly linked to the route table of its tier.

Destroy order falls out of the references: associations and routes go first,
then the NAT gateway, and only then is its Elastic IP released.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.configs.topology import NetworkTopology, RouteSpec, RouteTarget, SubnetTier
from infra.utils.tags import create_tags


@dataclass
class VpcOutputs:
    """Output values from VPC component."""
    vpc_id: pulumi.Output[str]
    internet_gateway_id: pulumi.Output[str]
    nat_gateway_id: pulumi.Output[str]
    nat_public_ip: pulumi.Output[str]
    public_subnet_ids: list[pulumi.Output[str]]
    app_subnet_ids: list[pulumi.Output[str]]
    data_subnet_ids: list[pulumi.Output[str]]
    public_route_table_id: pulumi.Output[str]
    private_route_table_id: pulumi.Output[str]


class VpcComponent(pulumi.ComponentResource):
    """
    VPC component with tiered subnets, IGW and NAT gateway.

    Subnets are created from the topology in declaration order; the
    NAT gateway is placed in the first public subnet.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        topology: NetworkTopology,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:networking:Vpc", name, None, opts)
        self.environment = environment
        self.topology = topology

        child_opts = pulumi.ResourceOptions(parent=self)

        self.vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            cidr_block=str(topology.vpc_cidr),
            instance_tenancy=topology.tenancy,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            tags=create_tags(environment, f"{name}-vpc"),
            opts=child_opts,
        )

        self.igw = aws.ec2.InternetGateway(
            f"{name}-igw",
            vpc_id=self.vpc.id,
            tags=create_tags(environment, f"{name}-igw"),
            opts=child_opts,
        )

        self.subnets: dict[str, aws.ec2.Subnet] = {}
        for spec in topology.subnets:
            self.subnets[spec.name] = aws.ec2.Subnet(
                f"{name}-{spec.name}-subnet",
                vpc_id=self.vpc.id,
                cidr_block=str(spec.cidr),
                availability_zone=spec.availability_zone,
                map_public_ip_on_launch=spec.is_public,
                tags=create_tags(
                    environment,
                    f"{name}-{spec.name}-subnet",
                    tier=spec.tier.value,
                ),
                opts=child_opts,
            )

        self._create_nat_gateway(name, child_opts)
        self._create_route_tables(name, child_opts)

        self.register_outputs({
            "vpc_id": self.vpc.id,
            "internet_gateway_id": self.igw.id,
            "nat_gateway_id": self.nat_gateway.id,
            "nat_public_ip": self.nat_eip.public_ip,
            "public_route_table_id": self.public_rt.id,
            "private_route_table_id": self.private_rt.id,
        })

    def _subnet_ids(self, tier: SubnetTier) -> list[pulumi.Output[str]]:
        return [self.subnets[spec.name].id for spec in self.topology.subnets_in_tier(tier)]

    def _create_nat_gateway(
        self,
        name: str,
        opts: pulumi.ResourceOptions,
    ) -> None:
        """Create the NAT gateway and its Elastic IP in the first public subnet."""
        nat_subnet = self.topology.subnets_in_tier(SubnetTier.PUBLIC)[0]

        self.nat_eip = aws.ec2.Eip(
            f"{name}-nat-eip",
            domain="vpc",
            tags=create_tags(self.environment, f"{name}-nat-eip"),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.igw]),
        )

        self.nat_gateway = aws.ec2.NatGateway(
            f"{name}-nat",
            allocation_id=self.nat_eip.id,
            subnet_id=self.subnets[nat_subnet.name].id,
            connectivity_type="public",
            tags=create_tags(self.environment, f"{name}-nat"),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.igw]),
        )

    def _route_args(self, routes: list[RouteSpec]) -> list[aws.ec2.RouteTableRouteArgs]:
        """Translate topology routes into route table entries, preserving order."""
        args = []
        for route in routes:
            if route.target == RouteTarget.INTERNET_GATEWAY:
                args.append(aws.ec2.RouteTableRouteArgs(
                    cidr_block=str(route.destination),
                    gateway_id=self.igw.id,
                ))
            else:
                args.append(aws.ec2.RouteTableRouteArgs(
                    cidr_block=str(route.destination),
                    nat_gateway_id=self.nat_gateway.id,
                ))
        return args

    def _create_route_tables(
        self,
        name: str,
        opts: pulumi.ResourceOptions,
    ) -> None:
        """Create route tables for public and private subnets."""
        self.public_rt = aws.ec2.RouteTable(
            f"{name}-public-rt",
            vpc_id=self.vpc.id,
            routes=self._route_args(self.topology.public_routes),
            tags=create_tags(self.environment, f"{name}-public-rt"),
            opts=opts,
        )

        # App and data tiers share one table; outbound only via NAT
        self.private_rt = aws.ec2.RouteTable(
            f"{name}-private-rt",
            vpc_id=self.vpc.id,
            routes=self._route_args(self.topology.private_routes),
            tags=create_tags(self.environment, f"{name}-private-rt"),
            opts=opts,
        )

        for spec in self.topology.subnets:
            route_table = self.public_rt if spec.is_public else self.private_rt
            aws.ec2.RouteTableAssociation(
                f"{name}-{spec.name}-rt-assoc",
                subnet_id=self.subnets[spec.name].id,
                route_table_id=route_table.id,
                opts=opts,
            )

    def get_outputs(self) -> VpcOutputs:
        """Get VPC output values."""
        return VpcOutputs(
            vpc_id=self.vpc.id,
            internet_gateway_id=self.igw.id,
            nat_gateway_id=self.nat_gateway.id,
            nat_public_ip=self.nat_eip.public_ip,
            public_subnet_ids=self._subnet_ids(SubnetTier.PUBLIC),
            app_subnet_ids=self._subnet_ids(SubnetTier.APP),
            data_subnet_ids=self._subnet_ids(SubnetTier.DATA),
            public_route_table_id=self.public_rt.id,
            private_route_table_id=self.private_rt.id,
        )
