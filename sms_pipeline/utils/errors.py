"""Custom exceptions for the SMS transaction pipeline"""


class PipelineError(Exception):
    """Base exception for pipeline errors"""
    pass


class ConfigurationError(PipelineError):
    """Configuration loading errors"""
    pass


class LLMError(PipelineError):
    """LLM API errors"""
    pass


class ExtractionError(PipelineError):
    """Extractor failures that escape a tier"""
    pass


class StoreError(PipelineError):
    """Transaction store errors"""
    pass


class DuplicateTransactionError(StoreError):
    """Raised when a message body has already been stored"""
    pass


class RetryableProcessingError(PipelineError):
    """Processing of one message failed and may be retried by the scheduler"""
    pass
