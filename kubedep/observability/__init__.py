"""Logging and metrics for kubedep."""
