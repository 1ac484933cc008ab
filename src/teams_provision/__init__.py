"""Bulk provisioning of Microsoft 365 groups and Teams."""

__version__ = "0.1.0"
