"""Pytest fixtures for infrastructure tests."""

import sys
from pathlib import Path

import pytest

from infra.configs.base import EnvironmentConfig


@pytest.fixture(scope="session", autouse=True)
def add_project_to_path():
    """Add project root to Python path for imports."""
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))
    yield
    # Cleanup
    sys.path.remove(str(project_root))


@pytest.fixture
def infra_project_root():
    """Return the infra package directory."""
    return Path(__file__).parent.parent.parent / "infra"


@pytest.fixture
def python_files_in_infra(infra_project_root):
    """Return all Python files in the infra package."""
    return [f for f in infra_project_root.rglob("*.py") if "__pycache__" not in str(f)]


def _make_config(**overrides) -> EnvironmentConfig:
    values = {
        "environment": "dev",
        "region": "us-east-1",
        "web_instance_type": "t3.micro",
        "web_elastic_ip": True,
        "ssh_ingress_cidr": None,
        "db_instance_class": "db.t3.medium",
        "db_instance_count": 2,
        "db_backup_retention_days": 1,
        "enable_deletion_protection": False,
        "enable_cloudtrail": True,
    }
    values.update(overrides)
    return EnvironmentConfig(**values)


@pytest.fixture
def dev_config() -> EnvironmentConfig:
    """Dev environment configuration."""
    return _make_config()


@pytest.fixture
def prod_config() -> EnvironmentConfig:
    """Production environment configuration."""
    return _make_config(
        environment="prod",
        web_instance_type="t3.medium",
        db_instance_class="db.r6g.large",
        db_backup_retention_days=14,
        enable_deletion_protection=True,
    )


@pytest.fixture
def config_factory():
    """Return a builder for EnvironmentConfig with dev defaults."""
    return _make_config
