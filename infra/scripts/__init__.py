"""Operational scripts run against deployed stacks."""
