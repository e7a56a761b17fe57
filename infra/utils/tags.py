"""
Tag factory for AWS resources.

Every resource carries Project, ManagedBy, Environment and Name; resources
that belong to one network tier also carry Tier.
"""

from infra.configs.constants import DEFAULT_TAGS


def create_tags(
    environment: str,
    resource_name: str,
    tier: str | None = None,
) -> dict[str, str]:
    """
    Create the tag set for an AWS resource.

    Args:
        environment: Deployment environment
        resource_name: Value of the Name tag
        tier: Network tier (public, app, data), omitted when None

    Returns:
        Dictionary of tags
    """
    tags = {
        **DEFAULT_TAGS,
        "Environment": environment,
        "Name": resource_name,
    }
    if tier is not None:
        tags["Tier"] = tier
    return tags
