"""Pydantic schemas for the generic transition endpoint."""

from pydantic import BaseModel, Field

from src.ct_common.enums import EntityKind


class TransitionRequest(BaseModel):
    entity_id: str = Field(..., min_length=1, max_length=26)
    entity_kind: EntityKind
    target_state: str = Field(..., min_length=1, max_length=32)
