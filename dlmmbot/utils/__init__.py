"""Utility helpers exposed by dlmmbot."""

from .logbook import LogSink, configure_logging
from .paths import log_dir, state_dir

__all__ = ["LogSink", "configure_logging", "log_dir", "state_dir"]
