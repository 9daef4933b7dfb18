"""
Data model definitions.
"""

import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


DEFAULT_SYSTEM_INSTRUCTION = "You are a helpful assistant."


class ModelFamily(Enum):
    GEMINI = "gemini"
    CLAUDE = "claude"
    OTHER = "other"


class ModelPolicy(BaseModel):
    """Per-request policy derived from the raw model identifier."""

    model_config = ConfigDict(frozen=True)

    model_id: str
    canonical_name: str
    family: ModelFamily = ModelFamily.OTHER
    thinking_enabled: bool = False
    mark_thoughts: bool = False


class NormalizedContent(BaseModel):
    text: str = ""
    images: List[Dict[str, Any]] = Field(default_factory=list)
    thought_text: Optional[str] = None


class AntigravityToken(BaseModel):
    """Routing identifiers issued by the token collaborator."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    project_id: str = Field(alias="projectId", min_length=1)
    session_id: str = Field(alias="sessionId", min_length=1)


class SamplingDefaults(BaseModel):
    top_p: float = Field(default=1.0, ge=0)
    top_k: int = Field(default=50, ge=0)
    temperature: float = Field(default=1.0, ge=0)
    max_tokens: int = Field(default=8192, ge=1)
    thinking_budget: int = Field(default=1024, ge=1)

    @field_validator("top_p", "top_k", "temperature", "max_tokens", "thinking_budget", mode="before")
    @classmethod
    def _normalize_number(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields[info.field_name]
        fallback = field.default
        if value is None or isinstance(value, bool):
            return fallback
        try:
            number = float(value)
        except (TypeError, ValueError):
            return fallback
        if not math.isfinite(number):
            return fallback
        minimum = next((m.ge for m in field.metadata if getattr(m, "ge", None) is not None), None)
        if minimum is not None and number < minimum:
            return fallback
        if field.annotation is int:
            return int(number)
        return number


class TranslatorConfig(BaseModel):
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    defaults: SamplingDefaults = Field(default_factory=SamplingDefaults)
    model_aliases: Dict[str, str] = Field(
        default_factory=lambda: {
            "claude-sonnet-4-5-thinking": "claude-sonnet-4-5",
            "claude-opus-4-5": "claude-opus-4-5-thinking",
            "gemini-2.5-flash-thinking": "gemini-2.5-flash",
        }
    )
    thinking_models: List[str] = Field(
        default_factory=lambda: ["gemini-2.5-pro", "rev19-uic3-1p", "gpt-oss-120b-medium"]
    )
    thinking_model_prefixes: List[str] = Field(default_factory=lambda: ["gemini-3-pro-"])
    api_key: Optional[str] = None

    @field_validator("system_instruction", mode="before")
    @classmethod
    def _normalize_system_instruction(cls, value: Any) -> str:
        if value is None:
            return DEFAULT_SYSTEM_INSTRUCTION
        text = str(value).strip()
        return text or DEFAULT_SYSTEM_INSTRUCTION

    @field_validator("thinking_models", "thinking_model_prefixes", mode="before")
    @classmethod
    def _strip_model_names(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("must be an array of model names")
        names = [str(item).strip() for item in value if item is not None]
        return [name for name in names if name]

    @field_validator("api_key", mode="before")
    @classmethod
    def _normalize_api_key(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None
