"""
Model rotation policy for repeated rate-limit recoveries.

Rotation sequence (1-based attempt numbers, attempt <= 0 treated as 1):
    1. First fallback model
    2. Main model (no override; the host's default applies)
    3. First fallback model again
    k >= 4. Fallback at index k - 3, sticking on the last fallback once the
       list is exhausted

A fallback is tried immediately, the main model gets one second chance, then
the policy widens through every configured fallback without cycling back.
"""

from typing import Sequence

from rate_limit_fallback.models.fallback_models import FallbackModelSpec, RotationDecision

MAIN_MODEL_ATTEMPT = 2


def next_model(fallback_models: Sequence[FallbackModelSpec], attempt_count: int) -> RotationDecision:
    """
    Pick the model for a recovery attempt.

    Args:
        fallback_models: Configured fallbacks in rotation order (at least one)
        attempt_count: Attempt number for the session (1-based)

    Returns:
        RotationDecision for the attempt

    Raises:
        ValueError: If fallback_models is empty
    """
    if not fallback_models:
        raise ValueError("at least one fallback model is required")

    attempt = max(attempt_count, 1)

    if attempt == MAIN_MODEL_ATTEMPT:
        return RotationDecision(use_main_model=True)

    # Attempts 1 and 3 both use the first fallback
    index = 0 if attempt <= 3 else min(attempt - 3, len(fallback_models) - 1)

    return RotationDecision(use_main_model=False, model=fallback_models[index])
