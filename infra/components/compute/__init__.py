"""
Compute components.

Components:
- WebInstanceComponent: EC2 web server with optional Elastic IP
"""

from infra.components.compute.web_instance import WebInstanceComponent, WebInstanceOutputs

__all__ = [
    "WebInstanceComponent",
    "WebInstanceOutputs",
]
