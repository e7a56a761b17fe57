"""
Environment configuration loader.

Loads and validates configuration from Pulumi stack config files.
"""

import pulumi

from infra.configs.base import EnvironmentConfig
from infra.configs.constants import (
    DB_INSTANCE_CLASSES,
    ENVIRONMENTS,
    INSTANCE_TYPES,
)


def get_config() -> EnvironmentConfig:
    """
    Load environment configuration from Pulumi stack config.

    Returns:
        EnvironmentConfig: Validated configuration object

    Raises:
        pulumi.ConfigMissingError: If required config values are missing
        ValueError: If a value is outside its allowed range
    """
    config = pulumi.Config()
    aws_config = pulumi.Config("aws")

    environment = config.require("environment")
    if environment not in ENVIRONMENTS:
        raise ValueError(
            f"Unknown environment '{environment}', expected one of {', '.join(ENVIRONMENTS)}"
        )

    db_instance_count = config.get_int("db_instance_count")
    if db_instance_count is None:
        db_instance_count = 2
    if db_instance_count < 1:
        raise ValueError("db_instance_count must be at least 1")

    backup_retention = config.get_int("db_backup_retention_days")
    if backup_retention is None:
        backup_retention = 7 if environment == "prod" else 1
    if not 1 <= backup_retention <= 35:
        raise ValueError("db_backup_retention_days must be between 1 and 35")

    web_elastic_ip = config.get_bool("web_elastic_ip")
    enable_cloudtrail = config.get_bool("enable_cloudtrail")
    deletion_protection = config.get_bool("enable_deletion_protection")

    return EnvironmentConfig(
        environment=environment,
        region=aws_config.get("region") or "us-east-1",
        web_instance_type=config.get("web_instance_type") or INSTANCE_TYPES[environment],
        web_elastic_ip=True if web_elastic_ip is None else web_elastic_ip,
        ssh_ingress_cidr=config.get("ssh_ingress_cidr"),
        db_instance_class=config.get("db_instance_class") or DB_INSTANCE_CLASSES[environment],
        db_instance_count=db_instance_count,
        db_backup_retention_days=backup_retention,
        enable_deletion_protection=(
            environment == "prod" if deletion_protection is None else deletion_protection
        ),
        enable_cloudtrail=True if enable_cloudtrail is None else enable_cloudtrail,
    )
