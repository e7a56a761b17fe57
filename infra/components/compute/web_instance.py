"""
EC2 Web Instance Component.

This is the public entry point of the stack (Internet -> IGW -> public subnet -> EC2).

Key Components:
1. AMI (Amazon Machine Image): latest Amazon Linux 2023, looked up at deploy time.
2. User Data: Bootstrap script that runs ONCE at first boot. Installs and starts nginx on port 80.
3. Placement:
   - subnet_id: PUBLIC subnet (routes to the Internet Gateway).
   - security_group_id: web group. HTTP/HTTPS from anywhere.
4. Static address (optional): an Elastic IP associated with the instance, so the
   public address survives stop/start. Released only after the association is gone.
5. Storage (root_block_device): 20GB gp3 SSD, encrypted at rest.
6. IMDSv2 (http_tokens="required"): Secures metadata service against SSRF attacks.
"""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.configs.base import EnvironmentConfig
from infra.utils.tags import create_tags

USER_DATA = """#!/bin/bash
set -e

dnf install -y nginx
systemctl enable --now nginx

echo "Bootstrap complete"
"""


@dataclass
class WebInstanceOutputs:
    """Output values from web instance component."""
    instance_id: pulumi.Output[str]
    private_ip: pulumi.Output[str]
    public_ip: pulumi.Output[str]


class WebInstanceComponent(pulumi.ComponentResource):
    """
    EC2 instance serving HTTP from the public subnet.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        config: EnvironmentConfig,
        subnet_id: pulumi.Input[str],
        security_group_id: pulumi.Input[str],
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:compute:WebInstance", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        ami = aws.ec2.get_ami(
            most_recent=True,
            owners=["amazon"],
            filters=[
                aws.ec2.GetAmiFilterArgs(
                    name="name",
                    values=["al2023-ami-2023.*-x86_64"],
                ),
                aws.ec2.GetAmiFilterArgs(
                    name="virtualization-type",
                    values=["hvm"],
                ),
            ],
        )

        self.instance = aws.ec2.Instance(
            f"{name}-instance",
            ami=ami.id,
            instance_type=config.web_instance_type,
            subnet_id=subnet_id,
            vpc_security_group_ids=[security_group_id],
            user_data=USER_DATA,
            user_data_replace_on_change=True,
            root_block_device=aws.ec2.InstanceRootBlockDeviceArgs(
                volume_size=20,
                volume_type="gp3",
                encrypted=True,
            ),
            metadata_options=aws.ec2.InstanceMetadataOptionsArgs(
                http_tokens="required",  # IMDSv2
                http_endpoint="enabled",
            ),
            tags=create_tags(environment, f"{name}-instance", tier="public"),
            opts=child_opts,
        )

        self.eip = None
        self.eip_association = None
        public_ip = self.instance.public_ip
        if config.web_elastic_ip:
            self.eip = aws.ec2.Eip(
                f"{name}-eip",
                domain="vpc",
                tags=create_tags(environment, f"{name}-eip"),
                opts=child_opts,
            )
            self.eip_association = aws.ec2.EipAssociation(
                f"{name}-eip-assoc",
                instance_id=self.instance.id,
                allocation_id=self.eip.id,
                opts=child_opts,
            )
            public_ip = self.eip.public_ip

        self.public_ip = public_ip

        self.register_outputs({
            "instance_id": self.instance.id,
            "private_ip": self.instance.private_ip,
            "public_ip": self.public_ip,
        })

    def get_outputs(self) -> WebInstanceOutputs:
        """Get web instance output values."""
        return WebInstanceOutputs(
            instance_id=self.instance.id,
            private_ip=self.instance.private_ip,
            public_ip=self.public_ip,
        )
