"""
Token estimation utilities for text-generation calls.
"""

import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


# Approximate characters per token
TOKEN_RATIOS = {
    "gpt": 4.0,
    "default": 4.0,
}

# Model context limits
MODEL_LIMITS = {
    "gpt-4o-mini": 128000,
    "gpt-4o": 128000,
    "gpt-4-turbo": 128000,
    "gpt-4": 8192,
    "gpt-3.5-turbo": 16385,
    "default": 8000,
}


def estimate_tokens(text: str, model: str = "default") -> int:
    """
    Estimate token count for text.

    This is an approximation. For exact counts, use model-specific tokenizers.
    """
    if not text:
        return 0

    ratio = TOKEN_RATIOS["default"]
    for family, r in TOKEN_RATIOS.items():
        if family in model.lower():
            ratio = r
            break

    # Blend character-based and word-based estimates
    base_tokens = len(text) / ratio
    word_count = len(text.split())
    estimated = int((base_tokens + word_count) / 2)

    # Small overhead for message formatting
    return estimated + 4


def get_model_limit(model: str) -> int:
    """Get the context limit for a model."""
    return MODEL_LIMITS.get(model, MODEL_LIMITS["default"])


def check_within_limit(
    prompt: str,
    system: Optional[str],
    max_output_tokens: int,
    model: str,
) -> Tuple[bool, int, int]:
    """
    Check if a prompt fits within model limits.

    Returns:
        Tuple of (fits, input_tokens, available_for_output).
    """
    input_tokens = estimate_tokens(prompt, model)
    if system:
        input_tokens += estimate_tokens(system, model)

    available = get_model_limit(model) - input_tokens
    return available >= max_output_tokens, input_tokens, available
