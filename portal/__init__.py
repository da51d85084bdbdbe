"""User Portal: session-authenticated user registration and management API."""

__version__ = "0.1.0"
