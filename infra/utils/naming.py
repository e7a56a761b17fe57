"""
Resource naming conventions for consistent AWS resource names.

Follows pattern: {project}-{environment}-{resource}
"""

from dataclasses import dataclass


@dataclass
class ResourceNamer:
    """
    Generates consistent resource names for AWS resources.

    Attributes:
        project: Project identifier
        environment: Deployment environment (dev, staging, prod)
    """
    project: str
    environment: str

    def name(self, resource: str) -> str:
        """
        Generate a resource name.

        Args:
            resource: Resource identifier (e.g., 'vpc', 'web-sg')

        Returns:
            Formatted resource name
        """
        if not resource:
            return f"{self.project}-{self.environment}"
        return f"{self.project}-{self.environment}-{resource}"

    def bucket_name(self, suffix: str, account_id: str | None = None) -> str:
        """
        Generate an S3 bucket name (must be globally unique).

        Args:
            suffix: Bucket suffix (e.g., 'cloudtrail-logs')
            account_id: AWS account ID appended for global uniqueness

        Returns:
            Lower-case bucket name
        """
        parts = [self.project, self.environment, suffix]
        if account_id:
            parts.append(account_id)
        return "-".join(parts).lower()

    def db_identifier(self, resource: str) -> str:
        """
        Generate an RDS identifier (letters, digits and hyphens only).

        Args:
            resource: Resource identifier (e.g., 'cluster', 'instance-1')

        Returns:
            Lower-case identifier
        """
        return self.name(resource).lower().replace("_", "-")
