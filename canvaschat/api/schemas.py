from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field


class ReloadIn(BaseModel):
    canvas: str


class SaveIn(BaseModel):
    canvas: str


class ChatIn(BaseModel):
    node_ids: List[str] = Field(default_factory=list)
    # per-request overrides; everything else comes from the environment
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    max_tokens: Optional[int] = None


class NodeOutcomeOut(BaseModel):
    node_id: str
    ok: bool
    error: Optional[str] = None
    response_node_id: Optional[str] = None
    resolved_placeholders: int = 0


class ChatOut(BaseModel):
    results: List[NodeOutcomeOut]
