"""
Pulumi infrastructure-as-code for a tiered VPC web stack.

This package defines AWS infrastructure including:
- VPC with public, application and data subnet tiers across two AZs
- Internet Gateway and NAT Gateway with an Elastic IP
- EC2 web instance with an optional static public address
- Aurora MySQL cluster in a multi-AZ subnet group
- Security groups for the web and data tiers
- CloudTrail audit trail with its S3 log bucket
"""
