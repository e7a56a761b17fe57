"""
Security Groups Component for Network Access Control.

Architectural Steps & Flow:
1. Create "Shell" Security Groups:
   - One group per topology entry, created without rules so every group exists
     (and has an ID) before any rule references it.

2. Define Rules (Micro-Segmentation):
   - Ingress (Inbound): "Who can enter?" by CIDR or by peer security group.
   - Egress (Outbound): "Who can I talk to?"
   - Each rule is its own resource (aws.vpc.SecurityGroupIngressRule / EgressRule),
     so peer references never form a cycle between group resources.

3. Access Patterns of the default topology:
   - Web: HTTP/HTTPS from anywhere, optional SSH from an operator range, all outbound.
   - Database: MySQL ONLY from the web group. No CIDR sources, no egress.

4. Stateful Nature:
   - Allowing an inbound request automatically allows its reply.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.configs.topology import SecurityGroupSpec, SecurityRuleSpec
from infra.utils.tags import create_tags


@dataclass
class SecurityGroupOutputs:
    """Output values from security groups component."""
    web_sg_id: pulumi.Output[str]
    database_sg_id: pulumi.Output[str]
    group_ids: dict[str, pulumi.Output[str]]


class SecurityGroupsComponent(pulumi.ComponentResource):
    """
    Security groups component for network access control.

    Groups and rules are driven by the topology's SecurityGroupSpec list.
    Peer references are resolved by group name.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        vpc_id: pulumi.Input[str],
        groups: list[SecurityGroupSpec],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:networking:SecurityGroups", name, None, opts)
        self.environment = environment

        child_opts = pulumi.ResourceOptions(parent=self)

        self.groups: dict[str, aws.ec2.SecurityGroup] = {}
        self.ingress_rules: dict[str, list[aws.vpc.SecurityGroupIngressRule]] = {}
        self.egress_rules: dict[str, list[aws.vpc.SecurityGroupEgressRule]] = {}
        for spec in groups:
            self.groups[spec.name] = aws.ec2.SecurityGroup(
                f"{name}-{spec.name}-sg",
                description=spec.description,
                vpc_id=vpc_id,
                tags=create_tags(environment, f"{name}-{spec.name}-sg"),
                opts=child_opts,
            )

        for spec in groups:
            self._create_rules(name, spec, child_opts)

        self.register_outputs({
            f"{group_name}_sg_id": group.id for group_name, group in self.groups.items()
        })

    def _rule_kwargs(self, rule: SecurityRuleSpec) -> dict:
        """Build the shared keyword arguments of an ingress/egress rule."""
        kwargs: dict = {
            "ip_protocol": rule.protocol,
            "description": rule.description or None,
        }
        if rule.protocol != "-1":
            kwargs["from_port"] = rule.from_port
            kwargs["to_port"] = rule.to_port
        if rule.peer is not None:
            kwargs["referenced_security_group_id"] = self.groups[rule.peer].id
        else:
            kwargs["cidr_ipv4"] = str(rule.cidr)
        return kwargs

    def _create_rules(
        self,
        name: str,
        spec: SecurityGroupSpec,
        opts: pulumi.ResourceOptions,
    ) -> None:
        """Create the ordered ingress and egress rules of one group."""
        group = self.groups[spec.name]
        self.ingress_rules[spec.name] = []
        self.egress_rules[spec.name] = []

        for index, rule in enumerate(spec.ingress):
            self.ingress_rules[spec.name].append(aws.vpc.SecurityGroupIngressRule(
                f"{name}-{spec.name}-ingress-{index}",
                security_group_id=group.id,
                tags=create_tags(self.environment, f"{name}-{spec.name}-ingress-{index}"),
                opts=opts,
                **self._rule_kwargs(rule),
            ))

        for index, rule in enumerate(spec.egress):
            self.egress_rules[spec.name].append(aws.vpc.SecurityGroupEgressRule(
                f"{name}-{spec.name}-egress-{index}",
                security_group_id=group.id,
                tags=create_tags(self.environment, f"{name}-{spec.name}-egress-{index}"),
                opts=opts,
                **self._rule_kwargs(rule),
            ))

    def get_outputs(self) -> SecurityGroupOutputs:
        """Get security group output values."""
        return SecurityGroupOutputs(
            web_sg_id=self.groups["web"].id,
            database_sg_id=self.groups["database"].id,
            group_ids={group_name: group.id for group_name, group in self.groups.items()},
        )
