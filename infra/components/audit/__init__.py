"""
Audit components.

Components:
- AuditTrailComponent: CloudTrail trail with its S3 log bucket
"""

from infra.components.audit.cloudtrail import AuditTrailComponent, AuditTrailOutputs

__all__ = [
    "AuditTrailComponent",
    "AuditTrailOutputs",
]
