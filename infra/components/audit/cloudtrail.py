"""
CloudTrail Component for Audit Logging.

Records control-plane (and optionally data-plane) API activity to durable storage.

Pieces:
1. Log Bucket: private S3 bucket that receives the trail's log files.
   - Versioning (protect overwrites), Encryption (AES256), PublicAccessBlock (absolute lockdown).
2. Bucket Policy: write access scoped to the CloudTrail service principal only.
   - s3:GetBucketAcl on the bucket (CloudTrail checks ownership before writing).
   - s3:PutObject on AWSLogs/<account-id>/* with bucket-owner-full-control.
   - Both statements are pinned to this trail via aws:SourceArn.
3. Trail: multi-region, includes global service events, log file validation on.
   Declared after the policy, otherwise CloudTrail rejects the bucket.
"""

import json
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from infra.configs.constants import CLOUDTRAIL_PRINCIPAL
from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags


@dataclass
class AuditTrailOutputs:
    """Output values from audit trail component."""
    trail_arn: pulumi.Output[str]
    bucket_name: pulumi.Output[str]
    bucket_arn: pulumi.Output[str]


def build_bucket_policy(
    bucket_arn: str,
    account_id: str,
    trail_arn: str,
) -> str:
    """
    Render the log bucket policy document.

    Args:
        bucket_arn: ARN of the log bucket
        account_id: AWS account the trail writes under
        trail_arn: ARN of the only trail allowed to write

    Returns:
        JSON policy document
    """
    condition = {"StringEquals": {"aws:SourceArn": trail_arn}}
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "AWSCloudTrailAclCheck",
                "Effect": "Allow",
                "Principal": {"Service": CLOUDTRAIL_PRINCIPAL},
                "Action": "s3:GetBucketAcl",
                "Resource": bucket_arn,
                "Condition": condition,
            },
            {
                "Sid": "AWSCloudTrailWrite",
                "Effect": "Allow",
                "Principal": {"Service": CLOUDTRAIL_PRINCIPAL},
                "Action": "s3:PutObject",
                "Resource": f"{bucket_arn}/AWSLogs/{account_id}/*",
                "Condition": {
                    "StringEquals": {
                        "s3:x-amz-acl": "bucket-owner-full-control",
                        "aws:SourceArn": trail_arn,
                    },
                },
            },
        ],
    })


class AuditTrailComponent(pulumi.ComponentResource):
    """
    CloudTrail trail with a dedicated, locked-down S3 log bucket.
    """

    def __init__(
        self,
        name: str,
        environment: str,
        namer: ResourceNamer,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__("custom:audit:AuditTrail", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        identity = aws.get_caller_identity()
        region = aws.get_region()
        partition = aws.get_partition()
        trail_name = namer.name("trail")
        trail_arn = f"arn:{partition.partition}:cloudtrail:{region.id}:{identity.account_id}:trail/{trail_name}"

        self.bucket = aws.s3.Bucket(
            f"{name}-cloudtrail-logs",
            bucket=namer.bucket_name("cloudtrail-logs", identity.account_id),
            force_destroy=environment != "prod",
            tags=create_tags(environment, f"{name}-cloudtrail-logs"),
            opts=child_opts,
        )

        aws.s3.BucketVersioning(
            f"{name}-cloudtrail-logs-versioning",
            bucket=self.bucket.id,
            versioning_configuration=aws.s3.BucketVersioningVersioningConfigurationArgs(
                status="Enabled",
            ),
            opts=child_opts,
        )

        aws.s3.BucketServerSideEncryptionConfiguration(
            f"{name}-cloudtrail-logs-encryption",
            bucket=self.bucket.id,
            rules=[aws.s3.BucketServerSideEncryptionConfigurationRuleArgs(
                apply_server_side_encryption_by_default=aws.s3.BucketServerSideEncryptionConfigurationRuleApplyServerSideEncryptionByDefaultArgs(
                    sse_algorithm="AES256",
                ),
            )],
            opts=child_opts,
        )

        public_block = aws.s3.BucketPublicAccessBlock(
            f"{name}-cloudtrail-logs-public-block",
            bucket=self.bucket.id,
            block_public_acls=True,
            block_public_policy=True,
            ignore_public_acls=True,
            restrict_public_buckets=True,
            opts=child_opts,
        )

        self.bucket_policy = aws.s3.BucketPolicy(
            f"{name}-cloudtrail-logs-policy",
            bucket=self.bucket.id,
            policy=self.bucket.arn.apply(
                lambda arn: build_bucket_policy(arn, identity.account_id, trail_arn)
            ),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[public_block]),
        )

        self.trail = aws.cloudtrail.Trail(
            f"{name}-trail",
            name=trail_name,
            s3_bucket_name=self.bucket.id,
            is_multi_region_trail=True,
            include_global_service_events=True,
            enable_log_file_validation=True,
            enable_logging=True,
            tags=create_tags(environment, f"{name}-trail"),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.bucket_policy]),
        )

        self.register_outputs({
            "trail_arn": self.trail.arn,
            "bucket_name": self.bucket.bucket,
        })

    def get_outputs(self) -> AuditTrailOutputs:
        """Get audit trail output values."""
        return AuditTrailOutputs(
            trail_arn=self.trail.arn,
            bucket_name=self.bucket.bucket,
            bucket_arn=self.bucket.arn,
        )
