"""
Tiered VPC Stack Architecture Diagram.

Renders the network topology (tiers, gateways, security boundaries, audit trail)
from the same topology model the Pulumi program deploys.

Dependencies:
    pip install diagrams   (plus the graphviz binary)

Usage:
    python -m infra.architecture_diagram [ENVIRONMENT]
    # Outputs: tiered_vpc_architecture.png
"""

import sys

from diagrams import Cluster, Diagram, Edge
from diagrams.aws.compute import EC2
from diagrams.aws.database import Aurora
from diagrams.aws.general import Users
from diagrams.aws.management import Cloudtrail
from diagrams.aws.network import (
    VPC,
    InternetGateway,
    NATGateway,
    PrivateSubnet,
    PublicSubnet,
)
from diagrams.aws.storage import S3

from infra.configs.base import EnvironmentConfig
from infra.configs.constants import DB_DEFAULTS, DB_INSTANCE_CLASSES, INSTANCE_TYPES, PORTS
from infra.configs.topology import NetworkTopology, SubnetTier, build_topology

graph_attr = {
    "fontsize": "14",
    "bgcolor": "white",
    "pad": "0.5",
    "splines": "ortho",
    "nodesep": "0.8",
    "ranksep": "1.2",
    "dpi": "200",
}

node_attr = {
    "fontsize": "11",
}

TIER_TITLES = {
    SubnetTier.PUBLIC: "Public Tier (0.0.0.0/0 -> IGW)",
    SubnetTier.APP: "App Tier (0.0.0.0/0 -> NAT)",
    SubnetTier.DATA: "Data Tier (no inbound path)",
}


def render_diagram(
    topology: NetworkTopology,
    config: EnvironmentConfig,
    filename: str = "tiered_vpc_architecture",
) -> str:
    """
    Render the topology as a PNG.

    Args:
        topology: Validated network topology
        config: Environment config (labels only)
        filename: Output file name without extension

    Returns:
        Path of the generated image
    """
    with Diagram(
        f"Tiered VPC Stack ({config.environment})",
        filename=filename,
        show=False,
        direction="TB",
        graph_attr=graph_attr,
        node_attr=node_attr,
    ):
        users = Users("Users\n(Internet)")

        with Cluster("Audit (outside VPC)"):
            trail = Cloudtrail("CloudTrail\nMulti-region\nLog validation")
            trail_bucket = S3("Log Bucket\nAES256 + Versioning\nPrivate")

        with Cluster(f"VPC: {topology.vpc_cidr}\nTenancy: {topology.tenancy}"):
            VPC(f"VPC\n{topology.vpc_cidr}")
            igw = InternetGateway("Internet Gateway")

            subnet_nodes = {}
            for tier in SubnetTier:
                with Cluster(TIER_TITLES[tier]):
                    for spec in topology.subnets_in_tier(tier):
                        icon = PublicSubnet if spec.is_public else PrivateSubnet
                        subnet_nodes[spec.name] = icon(
                            f"{spec.name}\n{spec.cidr}\n{spec.availability_zone}"
                        )

            public_subnet = topology.subnets_in_tier(SubnetTier.PUBLIC)[0]
            nat = NATGateway(f"NAT Gateway\nElastic IP\nin {public_subnet.name}")
            web = EC2(
                f"Web Instance\n{config.web_instance_type}\nweb-sg: 80/443 from anywhere"
            )
            database = Aurora(
                f"Aurora MySQL\n{config.db_instance_count} x {config.db_instance_class}\n"
                f"database-sg: {PORTS['mysql']} from web-sg"
            )

        users >> Edge(label="HTTP/HTTPS", color="orange", style="bold") >> igw
        igw >> Edge(color="orange") >> web
        subnet_nodes[public_subnet.name] >> Edge(style="dotted", color="gray") >> nat
        nat >> Edge(label="Outbound only", color="purple", style="dashed") >> igw
        web >> Edge(label=f"SQL :{PORTS['mysql']}", color="darkblue", style="dashed") >> database
        trail >> Edge(label="PutObject\nAWSLogs/<account>/", color="gray") >> trail_bucket

    return f"{filename}.png"


def main() -> None:
    """Render the default topology for an environment."""
    environment = sys.argv[1] if len(sys.argv) > 1 else "dev"
    config = EnvironmentConfig(
        environment=environment,
        region="us-east-1",
        web_instance_type=INSTANCE_TYPES[environment],
        web_elastic_ip=True,
        ssh_ingress_cidr=None,
        db_instance_class=DB_INSTANCE_CLASSES[environment],
        db_instance_count=2,
        db_backup_retention_days=7 if environment == "prod" else 1,
        enable_deletion_protection=environment == "prod",
        enable_cloudtrail=True,
    )
    path = render_diagram(build_topology(config), config)
    print(f"✅ Diagram generated: {path}")
    print(f"  - Engine: {DB_DEFAULTS['engine']} {DB_DEFAULTS['engine_version']}")


if __name__ == "__main__":
    main()
