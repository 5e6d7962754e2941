"""Operational entry points (migrations, scheduled jobs)."""
