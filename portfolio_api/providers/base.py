"""LLMProvider base classes and models"""
from abc import ABC, abstractmethod
from typing import List, Dict, Any, Literal, Optional
from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    """One turn of a conversation sent upstream"""
    role: Literal["user", "model"]
    text: str


class PromptPacket(BaseModel):
    """Input to LLM provider"""
    model: str
    contents: List[ChatTurn] = Field(min_length=1)
    temperature: Optional[float] = None


class LLMRawResponse(BaseModel):
    """Raw response from LLM provider"""
    content: str
    model: str
    provider: str
    finish_reason: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


class ModelDescriptor(BaseModel):
    """Model metadata"""
    id: str
    family: str
    context_window: Optional[int] = None
    notes: Optional[str] = None


class ProviderCapabilities(BaseModel):
    """Provider capability flags"""
    supports_multi_turn: bool = True
    supports_model_listing: bool = False


class LLMProvider(ABC):
    """Abstract base class for LLM providers"""

    name: str = "base"

    def __init__(self, api_key: str):
        self.api_key = api_key

    @abstractmethod
    async def generate(self, prompt: PromptPacket) -> LLMRawResponse:
        """Generate completion from prompt"""
        raise NotImplementedError()

    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        """Return provider capabilities"""
        raise NotImplementedError()

    @abstractmethod
    async def list_models(self) -> List[ModelDescriptor]:
        """List available models"""
        raise NotImplementedError()
