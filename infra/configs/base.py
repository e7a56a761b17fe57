"""
Base configuration dataclass for environment settings.

Provides type-safe configuration structure loaded from Pulumi stack configs.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Environment-specific configuration for infrastructure deployment.

    Attributes:
        environment: Deployment environment (dev, staging, prod)
        region: AWS region the stack is deployed into
        web_instance_type: EC2 instance type for the web server
        web_elastic_ip: Attach a static public address to the web instance
        ssh_ingress_cidr: CIDR allowed to reach the web instance on port 22 (None disables SSH)
        db_instance_class: Instance class for database cluster members
        db_instance_count: Number of database cluster members
        db_backup_retention_days: Automated backup retention period
        enable_deletion_protection: Enable deletion protection for the database
        enable_cloudtrail: Create the audit trail and its log bucket
    """
    environment: str
    region: str
    web_instance_type: str
    web_elastic_ip: bool
    ssh_ingress_cidr: str | None
    db_instance_class: str
    db_instance_count: int
    db_backup_retention_days: int
    enable_deletion_protection: bool
    enable_cloudtrail: bool

    @property
    def is_production(self) -> bool:
        """Check if this is a production environment."""
        return self.environment == "prod"
