"""Snapshot generation pipelines."""
