"""
Session message and prompt payload models.

SessionMessage mirrors an entry of the host's message history ({info, parts}).
Parts are kept as raw mappings because the history contains many part kinds
(tool calls, reasoning, step markers) that are never resubmitted; the prompt
builder validates only the kinds it can replay into the *PartInput models.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rate_limit_fallback.models.enums import MessageRole
from rate_limit_fallback.models.fallback_models import FallbackModelSpec


class MessageInfo(BaseModel):
    """Header of a history entry."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., description="Message identifier (revert target)")
    role: str = Field(..., description="Author role: 'user' or 'assistant'")
    session_id: Optional[str] = Field(default=None, alias="sessionID")
    agent: Optional[str] = Field(default=None, description="Agent the user message was addressed to")

    @property
    def is_user(self) -> bool:
        return self.role == MessageRole.USER.value


class SessionMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    info: MessageInfo
    parts: list[dict[str, Any]] = Field(default_factory=list)


class TextPartInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str = Field(..., min_length=1)


class FilePartInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    url: str = Field(..., min_length=1)
    mime: str = Field(..., min_length=1)
    filename: Optional[str] = None


class AgentPartInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["agent"] = "agent"
    name: str = Field(..., min_length=1)


PromptPart = Union[TextPartInput, FilePartInput, AgentPartInput]


class PromptRequest(BaseModel):
    """
    Body of a resubmitted prompt.

    model is omitted from the wire payload when None so the host keeps the
    session's main model.
    """
    model_config = ConfigDict(frozen=True)

    parts: list[PromptPart] = Field(..., min_length=1)
    agent: Optional[str] = None
    model: Optional[FallbackModelSpec] = None

    def to_wire(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "parts": [part.model_dump(exclude_none=True) for part in self.parts],
        }
        if self.agent:
            body["agent"] = self.agent
        if self.model is not None:
            body["model"] = self.model.to_wire()
        return body
