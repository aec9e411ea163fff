"""Request and response models for the chat endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatHistoryItem(BaseModel):
    """A message as the chat widget keeps it; incomplete items are skipped."""

    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    text: Optional[str] = None
    loading: bool = False


class PublicChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(min_length=1, max_length=4000)
    chat_history: List[ChatHistoryItem] = Field(default_factory=list, alias="chatHistory")


class AdminChatRequest(BaseModel):
    prompt: str = Field(min_length=1, max_length=16000)


class ChatReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    remaining: int
    reset_at: int = Field(alias="resetAt")
