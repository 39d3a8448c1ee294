"""
Prompt reconstruction for resubmitting a user's last request.

Responsible for:
- Locating the most recent user message in a session's history
- Rebuilding prompt parts from that message, dropping anything that cannot be
  replayed (synthetic parts, unknown part kinds, parts missing required fields)
- Constructing the PromptRequest with or without a model override
"""

from typing import Any, Optional, Sequence

import structlog
from pydantic import ValidationError

from rate_limit_fallback.fallback.exceptions import NoResubmittableContentError
from rate_limit_fallback.models.enums import PartType
from rate_limit_fallback.models.fallback_models import RotationDecision
from rate_limit_fallback.models.messages import (
    AgentPartInput,
    FilePartInput,
    PromptPart,
    PromptRequest,
    SessionMessage,
    TextPartInput,
)

logger = structlog.get_logger(__name__)

_PART_MODELS: dict[str, type[PromptPart]] = {
    PartType.TEXT.value: TextPartInput,
    PartType.FILE.value: FilePartInput,
    PartType.AGENT.value: AgentPartInput,
}


def find_last_user_message(messages: Sequence[SessionMessage]) -> Optional[SessionMessage]:
    """Return the most recent message authored by the user, if any."""
    for message in reversed(messages):
        if message.info.is_user:
            return message
    return None


def build_prompt_part(part: dict[str, Any]) -> Optional[PromptPart]:
    """
    Convert one history part into a prompt part.

    Returns None for synthetic parts, unsupported kinds, and parts missing
    their required fields (text; url + mime; name).
    """
    if part.get("synthetic"):
        return None

    part_type = part.get("type")
    if not isinstance(part_type, str):
        return None

    part_model = _PART_MODELS.get(part_type)
    if part_model is None:
        return None

    fields = {name: part.get(name) for name in part_model.model_fields if name in part}
    try:
        return part_model.model_validate(fields)
    except ValidationError:
        return None


def build_prompt_parts(parts: Sequence[dict[str, Any]]) -> list[PromptPart]:
    prompt_parts = []
    for part in parts:
        prompt_part = build_prompt_part(part)
        if prompt_part is not None:
            prompt_parts.append(prompt_part)
    return prompt_parts


def build_prompt_request(message: SessionMessage, decision: RotationDecision) -> PromptRequest:
    """
    Build the resubmission payload for a user message.

    Args:
        message: The user message to replay
        decision: Rotation decision; the model override is omitted for the main model

    Returns:
        PromptRequest carrying the message's agent, its replayable parts and
        the chosen model

    Raises:
        NoResubmittableContentError: If no part survives filtering
    """
    parts = build_prompt_parts(message.parts)
    if not parts:
        raise NoResubmittableContentError(
            "No valid parts found in user message",
            details={"message_id": message.info.id, "original_parts": len(message.parts)},
        )

    logger.debug(
        "Prompt rebuilt from user message",
        message_id=message.info.id,
        original_parts=len(message.parts),
        kept_parts=len(parts),
    )

    return PromptRequest(
        agent=message.info.agent,
        parts=parts,
        model=None if decision.use_main_model else decision.model,
    )
