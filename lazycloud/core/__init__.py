"""Interaction framework: phase controller, service instances, roles, commands."""
