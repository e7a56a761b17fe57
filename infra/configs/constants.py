"""
Infrastructure constants for the tiered VPC stack.

Contains CIDR blocks, availability zones, instance sizes, and port numbers.
"""

from typing import Final

PROJECT_NAME: Final[str] = "tiered-vpc"

# VPC Configuration
VPC_CIDR: Final[str] = "10.0.0.0/16"
VPC_TENANCY: Final[str] = "default"

# Subnet CIDR blocks, one per tier and AZ
SUBNET_CIDRS: Final[dict[str, str]] = {
    "public": "10.0.1.0/24",    # Web instance, NAT gateway (AZ-a)
    "public_b": "10.0.2.0/24",  # Spare public capacity (AZ-b)
    "app": "10.0.11.0/24",      # Private application tier (AZ-a)
    "app_b": "10.0.12.0/24",    # Private application tier (AZ-b)
    "data": "10.0.21.0/24",     # Database cluster (AZ-a)
    "data_b": "10.0.22.0/24",   # Database cluster (AZ-b)
}

# Zone letters appended to the region (e.g. us-east-1a, us-east-1b)
AZ_SUFFIXES: Final[tuple[str, str]] = ("a", "b")

ANYWHERE_CIDR: Final[str] = "0.0.0.0/0"

ENVIRONMENTS: Final[tuple[str, ...]] = ("dev", "staging", "prod")

# EC2 Instance types by environment
INSTANCE_TYPES: Final[dict[str, str]] = {
    "dev": "t3.micro",
    "staging": "t3.small",
    "prod": "t3.medium",
}

# RDS cluster instance classes by environment
DB_INSTANCE_CLASSES: Final[dict[str, str]] = {
    "dev": "db.t3.medium",
    "staging": "db.t3.medium",
    "prod": "db.r6g.large",
}

# Aurora cluster defaults
DB_DEFAULTS: Final[dict[str, str]] = {
    "engine": "aurora-mysql",
    "engine_version": "8.0.mysql_aurora.3.05.2",
    "database_name": "appdb",
    "master_username": "dbadmin",
    "backup_window": "03:00-04:00",
    "maintenance_window": "sun:05:00-sun:06:00",
}

# Default tags applied to all resources
DEFAULT_TAGS: Final[dict[str, str]] = {
    "Project": PROJECT_NAME,
    "ManagedBy": "pulumi",
}

# Port configurations
PORTS: Final[dict[str, int]] = {
    "ssh": 22,
    "http": 80,
    "https": 443,
    "mysql": 3306,
}

CLOUDTRAIL_PRINCIPAL: Final[str] = "cloudtrail.amazonaws.com"
