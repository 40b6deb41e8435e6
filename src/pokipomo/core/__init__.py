"""Core application components."""

from pokipomo.core.config import Config, TimerConfig, get_config

__all__ = ["Config", "TimerConfig", "get_config"]
