"""
Test suite for infra package syntax and structure validation.

Validates:
1. All Python modules have valid syntax
2. All imports can be resolved correctly
3. Component classes inherit from pulumi.ComponentResource
4. Output dataclasses are properly defined
5. Configuration and utility helpers behave as documented
"""

import ast
from dataclasses import FrozenInstanceError, is_dataclass
from pathlib import Path

import pulumi
import pytest

INFRA_DIR = Path(__file__).parent.parent.parent / "infra"


class TestInfraSyntaxValidation:
    """Validate Python syntax in all infra modules."""

    def test_all_infra_files_have_valid_syntax(self, python_files_in_infra):
        """All Python files in infra should parse without syntax errors."""
        errors = []

        for py_file in python_files_in_infra:
            try:
                with open(py_file, "r", encoding="utf-8") as f:
                    ast.parse(f.read())
            except SyntaxError as e:
                errors.append(f"{py_file}: {e.msg} (line {e.lineno})")

        assert not errors, "Syntax errors found:\n" + "\n".join(errors)

    def test_every_package_has_init(self):
        """Every directory holding modules should be a package."""
        for directory in [INFRA_DIR, *[p for p in INFRA_DIR.rglob("*") if p.is_dir()]]:
            if directory.name == "__pycache__":
                continue
            assert (directory / "__init__.py").exists(), f"Missing __init__.py in {directory}"


class TestInfraImports:
    """Validate that all infra imports are correctly structured."""

    def test_all_components_importable(self):
        """All component classes should be importable and be ComponentResources."""
        from infra.components.networking import SecurityGroupsComponent, VpcComponent
        from infra.components.compute import WebInstanceComponent
        from infra.components.storage import AuroraClusterComponent
        from infra.components.audit import AuditTrailComponent

        for cls in [
            VpcComponent,
            SecurityGroupsComponent,
            WebInstanceComponent,
            AuroraClusterComponent,
            AuditTrailComponent,
        ]:
            assert issubclass(cls, pulumi.ComponentResource)
            assert hasattr(cls, "get_outputs")

    def test_output_classes_are_dataclasses(self):
        """All output classes should be proper dataclasses."""
        from infra.components.networking import SecurityGroupOutputs, VpcOutputs
        from infra.components.compute import WebInstanceOutputs
        from infra.components.storage import AuroraOutputs
        from infra.components.audit import AuditTrailOutputs

        for cls in [VpcOutputs, SecurityGroupOutputs, WebInstanceOutputs, AuroraOutputs, AuditTrailOutputs]:
            assert is_dataclass(cls)

    def test_main_entry_point_has_main_function(self):
        """Main entry point should define a documented main()."""
        # __main__.py calls main() on import, which needs a Pulumi stack
        tree = ast.parse((INFRA_DIR / "__main__.py").read_text(encoding="utf-8"))

        main_funcs = [
            node for node in ast.walk(tree)
            if isinstance(node, ast.FunctionDef) and node.name == "main"
        ]
        assert len(main_funcs) == 1
        assert ast.get_docstring(main_funcs[0]) is not None
        assert ast.get_docstring(tree) is not None


class TestComponentOutputFields:
    """Validate component output dataclass fields."""

    @staticmethod
    def _fields(cls) -> set[str]:
        return {f.name for f in cls.__dataclass_fields__.values()}

    def test_vpc_outputs_fields(self):
        from infra.components.networking.vpc import VpcOutputs

        expected = {
            "vpc_id",
            "internet_gateway_id",
            "nat_gateway_id",
            "nat_public_ip",
            "public_subnet_ids",
            "app_subnet_ids",
            "data_subnet_ids",
        }
        assert expected.issubset(self._fields(VpcOutputs))

    def test_web_outputs_fields(self):
        from infra.components.compute.web_instance import WebInstanceOutputs

        assert {"instance_id", "private_ip", "public_ip"} == self._fields(WebInstanceOutputs)

    def test_aurora_outputs_fields(self):
        from infra.components.storage.aurora_cluster import AuroraOutputs

        assert {"endpoint", "reader_endpoint", "port", "master_secret_arn"}.issubset(
            self._fields(AuroraOutputs)
        )

    def test_audit_outputs_fields(self):
        from infra.components.audit.cloudtrail import AuditTrailOutputs

        assert {"trail_arn", "bucket_name"}.issubset(self._fields(AuditTrailOutputs))


class TestInfraConfiguration:
    """Validate configuration structure."""

    def test_environment_config_is_frozen(self, dev_config):
        """EnvironmentConfig should be immutable."""
        with pytest.raises(FrozenInstanceError):
            dev_config.environment = "prod"

    def test_environment_config_properties(self, dev_config, prod_config):
        assert dev_config.is_production is False
        assert prod_config.is_production is True

    def test_constants_are_consistent(self):
        """Every environment has an instance type and DB class."""
        from infra.configs.constants import DB_INSTANCE_CLASSES, ENVIRONMENTS, INSTANCE_TYPES

        for environment in ENVIRONMENTS:
            assert environment in INSTANCE_TYPES
            assert environment in DB_INSTANCE_CLASSES

    def test_subnet_cidrs_cover_all_tiers(self):
        from infra.configs.constants import SUBNET_CIDRS

        assert {"public", "app", "data", "data_b"}.issubset(SUBNET_CIDRS.keys())


class TestInfraUtilities:
    """Validate utility functions."""

    def test_resource_naming(self):
        from infra.utils.naming import ResourceNamer

        namer = ResourceNamer(project="tiered-vpc", environment="dev")

        assert namer.name("vpc") == "tiered-vpc-dev-vpc"
        assert namer.name("") == "tiered-vpc-dev"

    def test_bucket_name_is_lowercase_and_account_scoped(self):
        from infra.utils.naming import ResourceNamer

        namer = ResourceNamer(project="Tiered-VPC", environment="dev")

        assert namer.bucket_name("cloudtrail-logs", "123456789012") == "tiered-vpc-dev-cloudtrail-logs-123456789012"
        assert namer.bucket_name("logs") == "tiered-vpc-dev-logs"

    def test_db_identifier_has_no_underscores(self):
        from infra.utils.naming import ResourceNamer

        namer = ResourceNamer(project="tiered_vpc", environment="dev")

        assert namer.db_identifier("cluster") == "tiered-vpc-dev-cluster"

    def test_create_tags_function(self):
        from infra.utils.tags import create_tags

        tags = create_tags("dev", "test-resource", tier="data")

        assert tags["Environment"] == "dev"
        assert tags["Name"] == "test-resource"
        assert tags["Tier"] == "data"
        assert tags["ManagedBy"] == "pulumi"

    def test_create_tags_without_tier(self):
        from infra.utils.tags import create_tags

        tags = create_tags("prod", "tiered-vpc-prod-vpc")

        assert "Tier" not in tags
        assert tags["Project"] == "tiered-vpc"

    def test_format_env_lines(self):
        from infra.utils.outputs import format_env_lines

        lines = format_env_lines({
            "vpc_id": "vpc-123",
            "data_subnet_ids": ["subnet-a", "subnet-b"],
            "cloudtrail_arn": None,
            "db_port": 3306,
        })

        assert lines == [
            "VPC_ID=vpc-123",
            "DATA_SUBNET_IDS=subnet-a,subnet-b",
            "CLOUDTRAIL_ARN=",
            "DB_PORT=3306",
        ]
