"""Retry logic with exponential backoff, standing in for the job scheduler"""

import time
from typing import Callable, Any
from sms_pipeline.utils.logging import get_logger
from sms_pipeline.utils.errors import PipelineError, RetryableProcessingError

logger = get_logger(__name__)


def retry_with_exponential_backoff(
    func: Callable,
    max_retries: int = 3,
    base_delay: float = 1,
    max_delay: float = 60,
    *args,
    **kwargs
) -> Any:
    """
    Retry a function that reports retryable failures

    Only RetryableProcessingError is retried; any other exception propagates
    immediately.

    Args:
        func: Function to retry
        max_retries: Maximum attempts
        base_delay: Base delay in seconds
        max_delay: Max delay cap in seconds
        *args, **kwargs: Arguments to pass to func

    Returns:
        Function result

    Raises:
        PipelineError: If all retries exhausted
    """
    for attempt in range(max_retries):
        try:
            return func(*args, **kwargs)

        except RetryableProcessingError as e:
            if attempt == max_retries - 1:
                logger.error(f"All {max_retries} retry attempts exhausted")
                raise PipelineError(f"Failed after {max_retries} attempts: {e}")

            delay = min(base_delay * (2 ** attempt), max_delay)
            logger.warning(f"Attempt {attempt + 1} failed, retrying in {delay}s: {e}")
            time.sleep(delay)

    raise PipelineError("No attempt was made (max_retries < 1)")
