"""
Request and response schemas for the Health Wiki Proxy.

Pydantic models validating the inbound prompt and describing the wire shapes
produced by the serializers.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PROMPT_LENGTH = 1000


class InstructionPart(BaseModel):
    text: Optional[str] = None


class SystemInstruction(BaseModel):
    parts: List[InstructionPart] = Field(default_factory=list)


class ChatIn(BaseModel):
    """
    Model for inbound prompt requests.

    `systemInstruction.parts[0].text` is only used by the completion fallback.
    """
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(
        ...,
        description="User's free-text health question",
        examples=["I have a fever"]
    )
    system_instruction: Optional[SystemInstruction] = Field(
        None,
        alias="systemInstruction",
        description="Optional system text forwarded to the completion API"
    )

    @field_validator('prompt')
    @classmethod
    def validate_prompt(cls, v):
        """Validate prompt content."""
        if not v or not v.strip():
            raise ValueError('Prompt cannot be empty')

        prompt = v.strip()

        if len(prompt) > MAX_PROMPT_LENGTH:
            raise ValueError(f'Prompt is too long. Please keep it under {MAX_PROMPT_LENGTH} characters.')

        # Summaries are rendered as HTML by the text serializer
        suspicious_patterns = [
            r'<script[^>]*>.*?</script>',
            r'javascript:',
            r'on\w+\s*=',
        ]

        for pattern in suspicious_patterns:
            if re.search(pattern, prompt, re.IGNORECASE):
                raise ValueError('Prompt contains invalid content')

        return prompt

    @property
    def system_text(self) -> Optional[str]:
        if self.system_instruction and self.system_instruction.parts:
            return self.system_instruction.parts[0].text or None
        return None


class TextOut(BaseModel):
    """HTML-flavored message for chat widgets."""
    text: str = Field(..., description="Message, possibly containing HTML and markdown emphasis")


class ArticleOut(BaseModel):
    """Structured article summary."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., examples=["Fever"])
    summary: str = Field(..., description="First paragraph of the article")
    source_url: str = Field(..., alias="sourceUrl", examples=["https://en.wikipedia.org/wiki/Fever"])
    disclaimer: str


class MessageOut(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str
