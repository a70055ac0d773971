"""Utility functions and helpers."""

from flowrun.utils.variables import Interpolator, interpolate
from flowrun.utils.registry import ProviderRegistry
from flowrun.utils.config import configure_logging, get_config, load_env
from flowrun.utils.errors import (
    FlowRunError,
    ConfigurationError,
    WorkflowValidationError,
    CredentialError,
    ProviderError,
    NodeExecutionError,
)

__all__ = [
    "Interpolator",
    "interpolate",
    "ProviderRegistry",
    "configure_logging",
    "get_config",
    "load_env",
    "FlowRunError",
    "ConfigurationError",
    "WorkflowValidationError",
    "CredentialError",
    "ProviderError",
    "NodeExecutionError",
]
