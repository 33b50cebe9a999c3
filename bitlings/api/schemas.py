"""Request bodies for the HTTP API. Responses reuse the domain models."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import AliasChoices, Field

from bitlings.models.base import CamelModel
from bitlings.models.proposal import Proposal


class BitlingCreate(CamelModel):
    name: str
    prompt: str
    creator_handle: Optional[str] = None
    image_url: Optional[str] = None
    types: Optional[List[str]] = None
    # Kept loose on purpose: the bundle is repaired, not rejected
    stats: Optional[Dict[str, Any]] = None
    moves: Optional[List[Any]] = None
    description: Optional[str] = None
    behavior: Optional[str] = None


class VoteRequest(CamelModel):
    proposal_id: str = Field(
        ..., validation_alias=AliasChoices("proposalId", "bitlingId", "proposal_id")
    )
    value: Literal[1, -1] = Field(..., validation_alias=AliasChoices("value", "vote"))


class VoteResponse(CamelModel):
    message: str
    bitling: Proposal
    promoted: bool


class StatusUpdate(CamelModel):
    status: str


class GenerateStatsRequest(CamelModel):
    image_url: str
    name: str
    description: str


class GenerateImageRequest(CamelModel):
    prompt: str


class ImageResponse(CamelModel):
    url: str


class CollectRequest(CamelModel):
    proposal_id: str
    user_id: Optional[str] = None
    nickname: Optional[str] = None
