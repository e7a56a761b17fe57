"""
Pulumi component resources for the tiered VPC stack.

Each submodule provides reusable ComponentResource classes:
- networking: VPC, subnets, gateways, route tables, security groups
- compute: EC2 web instance
- storage: Aurora MySQL cluster
- audit: CloudTrail trail and log bucket
"""
