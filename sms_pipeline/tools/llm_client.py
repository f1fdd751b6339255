"""OpenAI-compatible LLM client with cost tracking (OpenRouter by default)."""

from openai import OpenAI
import os
import time
from typing import Optional
from sms_pipeline.constants import DEFAULT_CLOUD_BASE_URL, DEFAULT_CLOUD_MODEL, CLOUD_TIMEOUT_SECONDS
from sms_pipeline.utils.metrics import llm_tokens_counter, llm_cost_counter, llm_api_latency
from sms_pipeline.utils.errors import LLMError
from sms_pipeline.utils.logging import get_logger

logger = get_logger(__name__)

# Pricing per token (input tokens, simplified)
MODEL_PRICING = {
    "google/gemini-2.0-flash-001": 0.10 / 1_000_000,
    "anthropic/claude-haiku-4.5": 0.80 / 1_000_000,
    "openai/gpt-4o-mini": 0.15 / 1_000_000,
}


def create_client(api_key: Optional[str] = None, base_url: Optional[str] = None) -> OpenAI:
    """
    Create an OpenAI-compatible client.

    Args:
        api_key: API key (defaults to OPENROUTER_API_KEY)
        base_url: API base URL (defaults to OpenRouter)

    Returns:
        Configured client

    Raises:
        LLMError: If no API key is available or the client cannot be built
    """
    api_key = api_key or os.getenv("OPENROUTER_API_KEY")
    if not api_key:
        raise LLMError("OPENROUTER_API_KEY environment variable is not set")

    try:
        return OpenAI(api_key=api_key, base_url=base_url or DEFAULT_CLOUD_BASE_URL)
    except Exception as e:
        raise LLMError(f"Failed to create LLM client: {e}")


def call_llm(
    client: OpenAI,
    prompt: str,
    model: Optional[str] = None,
    timeout: float = CLOUD_TIMEOUT_SECONDS,
    max_retries: int = 1
) -> str:
    """
    Call LLM with cost tracking and bounded retries on rate limits.

    Args:
        client: Client from create_client()
        prompt: User prompt
        model: Model name (defaults to CLOUD_LLM_MODEL or Gemini Flash)
        timeout: Per-request timeout in seconds
        max_retries: Max attempts

    Returns:
        LLM response text (may be empty)

    Raises:
        LLMError: If the API call fails on every attempt
    """
    model = model or os.getenv("CLOUD_LLM_MODEL", DEFAULT_CLOUD_MODEL)

    for attempt in range(max_retries):
        try:
            start_time = time.time()

            response = client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0,
                timeout=timeout
            )

            latency = time.time() - start_time
            tokens = response.usage.total_tokens if response.usage else 0
            cost = calculate_cost(tokens, model)

            llm_tokens_counter.labels(model_name=model).inc(tokens)
            llm_cost_counter.labels(model_name=model).inc(cost)
            llm_api_latency.labels(model_name=model).observe(latency)

            logger.info(
                "LLM call successful",
                model=model,
                tokens=tokens,
                cost=cost,
                latency=latency
            )

            return response.choices[0].message.content or ""

        except Exception as e:
            if "rate_limit" in str(e).lower() or "429" in str(e):
                logger.warning(f"Rate limit hit (attempt {attempt + 1}/{max_retries})")
                if attempt < max_retries - 1:
                    time.sleep(2 ** attempt)
                else:
                    raise LLMError(f"Rate limit exceeded after {max_retries} attempts: {e}")
            else:
                logger.error(f"LLM API error: {e}", attempt=attempt)
                if attempt >= max_retries - 1:
                    raise LLMError(f"LLM API call failed after {max_retries} attempts: {e}")

    raise LLMError("LLM call was not attempted (max_retries < 1)")


def calculate_cost(tokens: int, model: str) -> float:
    """
    Calculate cost based on token usage and model pricing.

    Args:
        tokens: Number of tokens used
        model: Model name

    Returns:
        Cost in USD
    """
    price_per_token = MODEL_PRICING.get(model, 0.15 / 1_000_000)
    return tokens * price_per_token
