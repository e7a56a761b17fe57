"""
Utility functions for Pulumi infrastructure.

Provides naming conventions, tag factories, and output utilities.
"""

from infra.utils.naming import ResourceNamer
from infra.utils.tags import create_tags
from infra.utils.outputs import write_outputs_to_env

__all__ = [
    "ResourceNamer",
    "create_tags",
    "write_outputs_to_env",
]
