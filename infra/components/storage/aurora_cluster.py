"""
Aurora MySQL Cluster Component for the Data Tier.

Access Control - Who Can Connect:
1. Web instance (web_sg) -> Port 3306 ✅
2. Anyone else -> DENIED ❌

How the Connection Works:
1. Routing: the web instance reaches the cluster over the implicit LOCAL route (10.0.0.0/16). Traffic never leaves the VPC.
2. Security Group: database_sg only allows ingress on 3306 from web_sg (identity-based, not IP-based).
3. Credentials: manage_master_user_password=True means AWS generates the master password and stores it in Secrets Manager.
4. Placement: the DB subnet group covers the data subnets of two AZs. Cluster members are spread across them.

Backups: automated backups run inside backup_window and are kept for the configured
retention period. Production keeps a final snapshot and deletion protection.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.configs.base import EnvironmentConfig
from infra.configs.constants import DB_DEFAULTS, PORTS
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags


@dataclass
class AuroraOutputs:
    """Output values from Aurora cluster component."""
    cluster_id: pulumi.Output[str]
    endpoint: pulumi.Output[str]
    reader_endpoint: pulumi.Output[str]
    port: pulumi.Output[int]
    database_name: pulumi.Output[str]
    master_secret_arn: pulumi.Output[str]
    instance_ids: list[pulumi.Output[str]]


class AuroraClusterComponent(pulumi.ComponentResource):
    """
    Managed Aurora MySQL cluster with one writer and N-1 readers.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        config: EnvironmentConfig,
        namer: ResourceNamer,
        subnet_ids: list[pulumi.Input[str]],
        availability_zones: list[str],
        security_group_id: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:storage:AuroraCluster", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)
        db_name = DB_DEFAULTS["database_name"]

        self.subnet_group = aws.rds.SubnetGroup(
            f"{name}-subnet-group",
            name=namer.db_identifier("db-subnets"),
            subnet_ids=subnet_ids,
            tags=create_tags(environment, f"{name}-subnet-group"),
            opts=child_opts,
        )

        self.cluster = aws.rds.Cluster(
            f"{name}-cluster",
            cluster_identifier=namer.db_identifier("cluster"),
            engine=DB_DEFAULTS["engine"],
            engine_version=DB_DEFAULTS["engine_version"],
            database_name=db_name,
            master_username=DB_DEFAULTS["master_username"],
            manage_master_user_password=True,  # AWS manages password in Secrets Manager
            port=PORTS["mysql"],
            db_subnet_group_name=self.subnet_group.name,
            vpc_security_group_ids=[security_group_id],
            storage_encrypted=True,
            backup_retention_period=config.db_backup_retention_days,
            preferred_backup_window=DB_DEFAULTS["backup_window"],
            preferred_maintenance_window=DB_DEFAULTS["maintenance_window"],
            deletion_protection=config.enable_deletion_protection,
            skip_final_snapshot=not config.is_production,
            final_snapshot_identifier=namer.db_identifier("final-snapshot") if config.is_production else None,
            copy_tags_to_snapshot=True,
            tags=create_tags(environment, f"{name}-cluster", tier="data"),
            opts=child_opts,
        )

        self.instances: list[aws.rds.ClusterInstance] = []
        for index in range(config.db_instance_count):
            self.instances.append(aws.rds.ClusterInstance(
                f"{name}-instance-{index + 1}",
                identifier=namer.db_identifier(f"db-{index + 1}"),
                cluster_identifier=self.cluster.id,
                engine=self.cluster.engine,
                engine_version=self.cluster.engine_version,
                instance_class=config.db_instance_class,
                availability_zone=availability_zones[index % len(availability_zones)],
                publicly_accessible=False,
                promotion_tier=index,
                tags=create_tags(environment, f"{name}-instance-{index + 1}", tier="data"),
                opts=child_opts,
            ))

        self.register_outputs({
            "cluster_id": self.cluster.id,
            "endpoint": self.cluster.endpoint,
            "reader_endpoint": self.cluster.reader_endpoint,
            "port": self.cluster.port,
            "database_name": db_name,
        })

    def get_outputs(self) -> AuroraOutputs:
        """Get Aurora output values."""
        return AuroraOutputs(
            cluster_id=self.cluster.id,
            endpoint=self.cluster.endpoint,
            reader_endpoint=self.cluster.reader_endpoint,
            port=self.cluster.port,
            database_name=pulumi.Output.from_input(DB_DEFAULTS["database_name"]),
            master_secret_arn=self.cluster.master_user_secrets.apply(
                lambda secrets: secrets[0].secret_arn if secrets else ""
            ),
            instance_ids=[instance.id for instance in self.instances],
        )
