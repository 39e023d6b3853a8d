"""Adapters connecting the provisioning domain to storage and file formats."""
