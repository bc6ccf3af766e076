"""
Request Domain Model

Normalized (OpenAI-compatible) request shapes received from the gateway.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """Normalized chat message"""

    model_config = ConfigDict(frozen=True, extra="allow")

    # Role (system / user / assistant / tool)
    role: str
    # Plain text, or a list of typed content parts
    content: Union[str, list[dict[str, Any]], None] = None
    # Optional participant name
    name: Optional[str] = None

    def string_content(self) -> str:
        """Flatten the content to plain text, keeping only text parts."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        parts: list[str] = []
        for part in self.content:
            if part.get("type") == "text" and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)


class GeneralOpenAIRequest(BaseModel):
    """
    Normalized Request

    Superset of the chat completion and embedding request bodies. Unknown
    fields are kept so the gateway can pass through whatever the client sent.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    model: str = ""
    messages: list[Message] = Field(default_factory=list)
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False
    # Embedding input
    input: Union[str, list[Any], None] = None

    def parse_input(self) -> list[str]:
        """Return the embedding input as a list of strings."""
        if self.input is None:
            return []
        if isinstance(self.input, str):
            return [self.input]
        return [item for item in self.input if isinstance(item, str)]
