"""Utility modules"""

from .config_loader import load_config, get_section
from .errors import (
    PipelineError,
    ConfigurationError,
    LLMError,
    ExtractionError,
    StoreError,
    DuplicateTransactionError,
    RetryableProcessingError
)

__all__ = [
    "load_config",
    "get_section",
    "PipelineError",
    "ConfigurationError",
    "LLMError",
    "ExtractionError",
    "StoreError",
    "DuplicateTransactionError",
    "RetryableProcessingError"
]
