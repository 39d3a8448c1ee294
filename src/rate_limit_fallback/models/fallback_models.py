"""
Fallback data models: model identifiers, rotation decisions and per-session state.

FallbackModelSpec is the wire shape sent to the host when overriding the model
of a resubmitted prompt. SessionRetryState is the only mutable record owned by
the fallback core; it lives in the SessionStateStore.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rate_limit_fallback.models.enums import RecoveryPhase


class FallbackModelSpec(BaseModel):
    """
    Provider + model pair identifying a fallback model.

    Serialized with the host's field names (providerID / modelID).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, protected_namespaces=())

    provider_id: str = Field(..., alias="providerID", description="Provider identifier (e.g., 'anthropic')")
    model_id: str = Field(..., alias="modelID", description="Model identifier within the provider")

    @classmethod
    def parse(cls, identifier: Union[str, dict[str, Any], "FallbackModelSpec"]) -> "FallbackModelSpec":
        """
        Parse a model identifier.

        Accepts the object form ({providerID, modelID}) as-is. The string form
        splits on the first "/"; without a "/" both fields take the whole string.

        Examples:
            >>> FallbackModelSpec.parse("anthropic/claude-opus-4-5")
            FallbackModelSpec(provider_id='anthropic', model_id='claude-opus-4-5')
            >>> FallbackModelSpec.parse("openrouter/meta/llama-3").model_id
            'meta/llama-3'
        """
        if isinstance(identifier, cls):
            return identifier
        if isinstance(identifier, dict):
            return cls.model_validate(identifier)

        provider_id, sep, model_id = identifier.partition("/")
        if not sep:
            return cls(provider_id=identifier, model_id=identifier)
        return cls(provider_id=provider_id, model_id=model_id)

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"{self.provider_id}/{self.model_id}"


@dataclass(frozen=True)
class RotationDecision:
    """
    Which model the next recovery attempt resubmits on.

    When use_main_model is True, model is None and no override is sent so the
    host's default model applies.
    """

    use_main_model: bool
    model: Optional[FallbackModelSpec] = None

    def __post_init__(self) -> None:
        if self.use_main_model and self.model is not None:
            raise ValueError("model must be None when use_main_model is set")
        if not self.use_main_model and self.model is None:
            raise ValueError("model is required unless use_main_model is set")

    @property
    def label(self) -> str:
        return "main" if self.use_main_model else str(self.model)


@dataclass
class SessionRetryState:
    """
    Mutable retry bookkeeping for one session.

    Attributes:
        fallback_active: True while a cooldown window is in effect
        cooldown_end_time: Epoch milliseconds after which a new retry is allowed
        attempt_count: Retry attempts triggered since the last reset
        recovering: True while a recovery sequence is in flight
    """

    fallback_active: bool = False
    cooldown_end_time: float = 0.0
    attempt_count: int = 0
    recovering: bool = False

    @property
    def phase(self) -> RecoveryPhase:
        if self.recovering:
            return RecoveryPhase.RECOVERING
        if self.fallback_active:
            return RecoveryPhase.COOLDOWN
        return RecoveryPhase.IDLE

    def in_cooldown(self, now_ms: float) -> bool:
        return self.fallback_active and now_ms < self.cooldown_end_time

    def engage(self, now_ms: float, cooldown_ms: int) -> None:
        """Record a new attempt and open (or extend) the cooldown window."""
        self.attempt_count = max(self.attempt_count, 0) + 1
        self.fallback_active = True
        self.cooldown_end_time = max(self.cooldown_end_time, now_ms + cooldown_ms)

    def reset(self) -> None:
        self.fallback_active = False
        self.attempt_count = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "fallbackActive": self.fallback_active,
            "cooldownEndTime": self.cooldown_end_time,
            "attemptCount": self.attempt_count,
            "phase": self.phase.value,
        }
