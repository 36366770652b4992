"""Utility modules for the schedule kernel."""
