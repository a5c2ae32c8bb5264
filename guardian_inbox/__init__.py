"""Notification inbox service for the Guardian Care safety reporting app."""

__version__ = "0.1.0"
