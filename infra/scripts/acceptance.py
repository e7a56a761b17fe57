"""
Post-deployment acceptance checks for a deployed stack.

Usage:
    python -m infra.scripts.acceptance --stack dev
    python -m infra.scripts.acceptance --stack prod --region us-east-1

Purpose:
- Read stack outputs from the Pulumi CLI
- Verify security group rules as deployed (not as declared)
- Probe the web instance's HTTP port and the database port from this host
- Confirm the audit trail is logging

Dependencies: boto3, pulumi CLI
System role: Acceptance tests of the deployed environment
"""

import json
import logging
import socket
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from infra.configs.constants import ANYWHERE_CIDR, PORTS

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).parent.parent.parent


@dataclass
class CheckResult:
    """Outcome of one acceptance check."""
    name: str
    passed: bool
    detail: str


def load_stack_outputs(stack: str, cwd: Path = PROJECT_ROOT) -> Optional[dict[str, Any]]:
    """
    Get stack outputs from the Pulumi CLI.

    Args:
        stack: Stack name (e.g. dev)
        cwd: Directory holding Pulumi.yaml

    Returns:
        dict: Stack outputs or None if they could not be read
    """
    try:
        logger.info(f"Retrieving outputs of stack {stack}...")
        result = subprocess.run(
            ["pulumi", "stack", "output", "-s", stack, "--json", "--show-secrets"],
            check=True,
            capture_output=True,
            text=True,
            cwd=str(cwd),
        )
        return json.loads(result.stdout)

    except subprocess.CalledProcessError as e:
        logger.error(f"Failed to retrieve Pulumi outputs: {e.stderr}")
        return None
    except json.JSONDecodeError:
        logger.error("Failed to parse Pulumi outputs")
        return None
    except FileNotFoundError:
        logger.error("Pulumi CLI not found. Install Pulumi and try again.")
        return None


def tcp_port_open(host: str, port: int, timeout: float = 5.0) -> bool:
    """Attempt a TCP connection; True if the handshake completes."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class AcceptanceChecker:
    """Run acceptance checks against a deployed stack."""

    def __init__(
        self,
        outputs: dict[str, Any],
        region: Optional[str] = None,
        probe_timeout: float = 5.0,
    ) -> None:
        """
        Initialize checker.

        Args:
            outputs: Stack outputs (as exported by the Pulumi program)
            region: AWS region, defaults to the boto3 session region
            probe_timeout: Seconds to wait for TCP probes
        """
        self.outputs = outputs
        self.probe_timeout = probe_timeout
        self._ec2 = boto3.client("ec2", region_name=region)
        self._cloudtrail = boto3.client("cloudtrail", region_name=region)

    def _ingress_rules(self, group_id: str) -> list[dict[str, Any]]:
        paginator = self._ec2.get_paginator("describe_security_group_rules")
        pages = paginator.paginate(Filters=[{"Name": "group-id", "Values": [group_id]}])
        return [
            rule
            for page in pages
            for rule in page["SecurityGroupRules"]
            if not rule["IsEgress"]
        ]

    def check_database_ingress_restricted(self) -> CheckResult:
        """Database group admits tcp on its data port only, and only from the web group."""
        name = "database ingress restricted to web tier"
        db_sg = self.outputs["database_sg_id"]
        web_sg = self.outputs["web_sg_id"]
        db_port = int(self.outputs.get("db_port") or PORTS["mysql"])

        try:
            rules = self._ingress_rules(db_sg)
        except ClientError as e:
            return CheckResult(name, False, f"describe_security_group_rules failed: {e}")

        if not rules:
            return CheckResult(name, False, f"{db_sg} has no ingress rules")

        for rule in rules:
            if rule.get("CidrIpv4") or rule.get("CidrIpv6") or rule.get("PrefixListId"):
                return CheckResult(name, False, f"rule {rule['SecurityGroupRuleId']} allows an address range")
            peer = rule.get("ReferencedGroupInfo", {}).get("GroupId")
            if peer != web_sg:
                return CheckResult(name, False, f"rule {rule['SecurityGroupRuleId']} references {peer}")
            ports = (rule.get("FromPort"), rule.get("ToPort"))
            if rule["IpProtocol"] != "tcp" or ports != (db_port, db_port):
                return CheckResult(
                    name,
                    False,
                    f"rule {rule['SecurityGroupRuleId']} admits {rule['IpProtocol']} "
                    f"{rule.get('FromPort')}-{rule.get('ToPort')}, expected tcp/{db_port}",
                )

        return CheckResult(name, True, f"{len(rules)} rule(s), all tcp/{db_port} from {web_sg}")

    def check_web_http_open(self) -> CheckResult:
        """Web group admits HTTP from anywhere."""
        name = "web HTTP open to the internet"
        web_sg = self.outputs["web_sg_id"]
        port = PORTS["http"]

        try:
            rules = self._ingress_rules(web_sg)
        except ClientError as e:
            return CheckResult(name, False, f"describe_security_group_rules failed: {e}")

        for rule in rules:
            if rule.get("CidrIpv4") != ANYWHERE_CIDR:
                continue
            if rule["IpProtocol"] == "-1" or (
                rule["IpProtocol"] == "tcp" and rule["FromPort"] <= port <= rule["ToPort"]
            ):
                return CheckResult(name, True, f"rule {rule['SecurityGroupRuleId']}")

        return CheckResult(name, False, f"no rule admits tcp/{port} from {ANYWHERE_CIDR}")

    def check_web_http_reachable(self) -> CheckResult:
        """An inbound connection to the web instance's HTTP port is accepted."""
        name = "web HTTP reachable"
        host = self.outputs.get("web_public_ip")
        if not host:
            return CheckResult(name, False, "web_public_ip not exported")

        if tcp_port_open(host, PORTS["http"], self.probe_timeout):
            return CheckResult(name, True, f"{host}:{PORTS['http']} accepted")
        return CheckResult(name, False, f"{host}:{PORTS['http']} refused or timed out")

    def check_database_unreachable(self) -> CheckResult:
        """An inbound connection to the database port from this host is refused."""
        name = "database unreachable from outside"
        host = self.outputs.get("db_endpoint")
        port = int(self.outputs.get("db_port") or PORTS["mysql"])
        if not host:
            return CheckResult(name, False, "db_endpoint not exported")

        if tcp_port_open(host, port, self.probe_timeout):
            return CheckResult(name, False, f"{host}:{port} accepted a connection")
        return CheckResult(name, True, f"{host}:{port} refused or timed out")

    def check_trail_logging(self) -> CheckResult:
        """The audit trail exists and is recording."""
        name = "audit trail logging"
        trail_arn = self.outputs.get("cloudtrail_arn")
        if not trail_arn:
            return CheckResult(name, False, "cloudtrail_arn not exported (trail disabled?)")

        try:
            status = self._cloudtrail.get_trail_status(Name=trail_arn)
        except ClientError as e:
            return CheckResult(name, False, f"get_trail_status failed: {e}")

        if status.get("IsLogging"):
            return CheckResult(name, True, trail_arn)
        return CheckResult(name, False, f"{trail_arn} is not logging")

    def run_all(self) -> list[CheckResult]:
        """Run every check and log each outcome."""
        results = [
            self.check_database_ingress_restricted(),
            self.check_web_http_open(),
            self.check_web_http_reachable(),
            self.check_database_unreachable(),
            self.check_trail_logging(),
        ]
        for result in results:
            if result.passed:
                logger.info(f"✓ {result.name}: {result.detail}")
            else:
                logger.error(f"✗ {result.name}: {result.detail}")
        return results


def _flag_value(argv: list[str], flag: str) -> Optional[str]:
    if flag in argv:
        idx = argv.index(flag)
        if idx + 1 < len(argv):
            return argv[idx + 1]
    return None


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    stack = _flag_value(sys.argv, "--stack")
    region = _flag_value(sys.argv, "--region")

    if not stack:
        print("Usage: python -m infra.scripts.acceptance --stack STACK [--region REGION]")
        sys.exit(1)

    outputs = load_stack_outputs(stack)
    if outputs is None:
        sys.exit(1)

    try:
        results = AcceptanceChecker(outputs, region=region).run_all()
    except KeyError as e:
        logger.error(f"Stack output missing: {e}")
        sys.exit(1)
    except BotoCoreError as e:
        logger.error(f"AWS client error: {e}")
        sys.exit(1)

    failed = [result for result in results if not result.passed]
    logger.info(f"{len(results) - len(failed)}/{len(results)} checks passed")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
