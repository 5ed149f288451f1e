"""Utility modules for logging."""

from sarb.utils.logging import setup_logging, ComponentLogger

__all__ = ["setup_logging", "ComponentLogger"]
