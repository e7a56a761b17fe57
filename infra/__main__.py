"""
Pulumi program entry point for the tiered VPC stack.

Instantiates all component resources in dependency order:
1. Configuration and topology validation
2. VPC (subnets, IGW, NAT, route tables) -> Security Groups
3. Audit trail (log bucket, bucket policy, CloudTrail)
4. EC2 web instance
5. Aurora cluster
"""

import pulumi

from infra.configs.constants import PROJECT_NAME
from infra.configs.environment import get_config
from infra.configs.topology import SubnetTier, build_topology
from infra.utils.naming import ResourceNamer
from infra.utils.outputs import write_outputs_to_env

# Networking
from infra.components.networking.vpc import VpcComponent
from infra.components.networking.security_groups import SecurityGroupsComponent

# Audit
from infra.components.audit.cloudtrail import AuditTrailComponent

# Compute
from infra.components.compute.web_instance import WebInstanceComponent

# Storage
from infra.components.storage.aurora_cluster import AuroraClusterComponent


def main() -> None:
    """Deploy the tiered VPC stack."""
    # Load configuration
    config = get_config()
    namer = ResourceNamer(project=PROJECT_NAME, environment=config.environment)
    base_name = namer.name("")

    # Validate layout before declaring anything
    topology = build_topology(config)
    pulumi.log.info(
        f"Topology: {len(topology.subnets)} subnets, "
        f"{len(topology.security_groups)} security groups in {config.region}"
    )

    # --- Layer 1: Networking Foundation ---
    vpc = VpcComponent(
        name=base_name,
        environment=config.environment,
        topology=topology,
    )
    vpc_outputs = vpc.get_outputs()

    security_groups = SecurityGroupsComponent(
        name=base_name,
        environment=config.environment,
        vpc_id=vpc_outputs.vpc_id,
        groups=topology.security_groups,
    )
    sg_outputs = security_groups.get_outputs()

    # --- Layer 2: Audit ---
    audit_outputs = None
    if config.enable_cloudtrail:
        audit_trail = AuditTrailComponent(
            name=base_name,
            environment=config.environment,
            namer=namer,
        )
        audit_outputs = audit_trail.get_outputs()
    else:
        pulumi.log.warn("CloudTrail disabled for this stack; API activity will not be recorded")

    # --- Layer 3: Compute ---
    web = WebInstanceComponent(
        name=namer.name("web"),
        environment=config.environment,
        config=config,
        subnet_id=vpc_outputs.public_subnet_ids[0],
        security_group_id=sg_outputs.web_sg_id,
    )
    web_outputs = web.get_outputs()

    # --- Layer 4: Data ---
    data_zones = [subnet.availability_zone for subnet in topology.subnets_in_tier(SubnetTier.DATA)]
    database = AuroraClusterComponent(
        name=namer.name("db"),
        environment=config.environment,
        config=config,
        namer=namer,
        subnet_ids=vpc_outputs.data_subnet_ids,
        availability_zones=data_zones,
        security_group_id=sg_outputs.database_sg_id,
    )
    db_outputs = database.get_outputs()

    # --- Exports ---
    outputs = {
        "vpc_id": vpc_outputs.vpc_id,
        "public_subnet_ids": pulumi.Output.all(*vpc_outputs.public_subnet_ids),
        "app_subnet_ids": pulumi.Output.all(*vpc_outputs.app_subnet_ids),
        "data_subnet_ids": pulumi.Output.all(*vpc_outputs.data_subnet_ids),
        "nat_gateway_id": vpc_outputs.nat_gateway_id,
        "nat_public_ip": vpc_outputs.nat_public_ip,
        "web_sg_id": sg_outputs.web_sg_id,
        "database_sg_id": sg_outputs.database_sg_id,
        "web_instance_id": web_outputs.instance_id,
        "web_public_ip": web_outputs.public_ip,
        "db_cluster_id": db_outputs.cluster_id,
        "db_endpoint": db_outputs.endpoint,
        "db_reader_endpoint": db_outputs.reader_endpoint,
        "db_port": db_outputs.port,
        "db_name": db_outputs.database_name,
        "db_master_secret_arn": db_outputs.master_secret_arn,
    }
    if audit_outputs is not None:
        outputs["cloudtrail_arn"] = audit_outputs.trail_arn
        outputs["cloudtrail_bucket"] = audit_outputs.bucket_name

    # Write outputs to .env file for local tooling
    write_outputs_to_env(outputs, "infrastructure.env")

    # Export to Pulumi stack
    for key, value in outputs.items():
        pulumi.export(key, value)


# Execute
main()
