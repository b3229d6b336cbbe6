"""Core entities shared by every service."""
