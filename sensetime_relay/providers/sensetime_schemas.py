"""
SenseTime Wire Schemas

Pydantic models for the SenseTime request/response payloads. Every response
field has a default so partial payloads decode the way the upstream sends
them; unknown fields are ignored.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field, model_validator

from sensetime_relay.domain.relay import Usage


# =============================================================================
# Requests
# =============================================================================

class SenseMessage(BaseModel):
    role: str
    content: str


class SenseChatRequest(BaseModel):
    model: str
    messages: list[SenseMessage]
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stream: Optional[bool] = None
    max_new_tokens: Optional[int] = None


class SenseEmbeddingRequest(BaseModel):
    model: str
    input: list[str]


# =============================================================================
# Responses
# =============================================================================

class SenseResponseModel(BaseModel):
    """Response base: explicit nulls fall back to the field default."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class SenseUsage(SenseResponseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_usage(self) -> Usage:
        return Usage(
            prompt_tokens=self.prompt_tokens,
            completion_tokens=self.completion_tokens,
            total_tokens=self.total_tokens,
        )


class SenseErrorMessage(SenseResponseModel):
    code: Union[int, str] = ""
    message: str = ""
    details: list[str] = Field(default_factory=list)


class SenseResponseMessage(SenseResponseModel):
    role: str = ""
    message: str = ""
    index: int = 0
    finish_reason: str = ""


class SenseResponseData(SenseResponseModel):
    id: str = ""
    choices: list[SenseResponseMessage] = Field(default_factory=list)
    usage: SenseUsage = Field(default_factory=SenseUsage)


class SenseChatResponse(SenseResponseModel):
    data: SenseResponseData = Field(default_factory=SenseResponseData)
    error: SenseErrorMessage = Field(default_factory=SenseErrorMessage)


class SenseStreamChoice(SenseResponseModel):
    role: str = ""
    delta: str = ""
    index: int = 0
    finish_reason: str = ""


class SenseStreamData(SenseResponseModel):
    id: str = ""
    choices: list[SenseStreamChoice] = Field(default_factory=list)


class SenseStatus(SenseResponseModel):
    code: int = 0
    message: str = ""


class SenseChatStreamResponse(SenseResponseModel):
    data: SenseStreamData = Field(default_factory=SenseStreamData)
    usage: SenseUsage = Field(default_factory=SenseUsage)
    status: SenseStatus = Field(default_factory=SenseStatus)


class SenseEmbeddingData(SenseResponseModel):
    index: int = 0
    embedding: list[float] = Field(default_factory=list)
    status_code: int = 0
    status_message: str = ""


class SenseEmbeddingResponse(SenseResponseModel):
    embeddings: list[SenseEmbeddingData] = Field(default_factory=list)
    usage: SenseUsage = Field(default_factory=SenseUsage)
    error: SenseErrorMessage = Field(default_factory=SenseErrorMessage)
