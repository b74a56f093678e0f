"""Broker configuration."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TIMEOUT = 0.3


@dataclass
class FSConfig:
    """Settings that control how the broker groups and filters events.

    ``timeout`` is the number of seconds to wait for events to be grouped
    and processed together.
    """

    timeout: float = DEFAULT_TIMEOUT
    ignore_sys_files: bool = True
    ignore_hidden_files: bool = True
    emit_chmod: bool = False


def default_config() -> FSConfig:
    """Return a configuration holding the default settings."""
    return FSConfig()