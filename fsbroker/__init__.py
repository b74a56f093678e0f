"""Watch directories and group file system notifications into high-level actions."""

__version__ = "0.1.0"