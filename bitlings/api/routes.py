import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Header, Query, Request

from bitlings.api.schemas import (
    BitlingCreate,
    CollectRequest,
    GenerateImageRequest,
    GenerateStatsRequest,
    ImageResponse,
    StatusUpdate,
    VoteRequest,
    VoteResponse,
)
from bitlings.llm.schemas import GeneratedBundle
from bitlings.models.collection_entry import CollectionEntry, CollectionStats
from bitlings.models.creature_type import ProposalStatus
from bitlings.models.proposal import Proposal, ProposalWithStats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _services(request: Request):
    return request.app.state.services


@router.get("/health")
def health(request: Request):
    return {"status": "ok", "bitlings": _services(request).db.proposals.count()}


# Bitlings

@router.post("/bitlings", status_code=201, response_model=ProposalWithStats)
def create_bitling(payload: BitlingCreate, request: Request):
    return _services(request).proposals.submit(
        payload.name,
        payload.prompt,
        payload.image_url,
        creator_handle=payload.creator_handle,
        types=payload.types,
        stats=payload.stats,
        moves=payload.moves,
        description=payload.description,
        behavior=payload.behavior,
    )


@router.get("/bitlings", response_model=List[Proposal])
def list_bitlings(
    request: Request,
    status: Optional[ProposalStatus] = None,
    sort: Literal["newest", "topRated"] = "newest",
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1),
):
    return _services(request).proposals.list(status=status, sort=sort, page=page, limit=limit)


# Declared before /bitlings/{bitling_id} so "leaderboard" is not taken for an id
@router.get("/bitlings/leaderboard", response_model=List[Proposal])
def leaderboard(
    request: Request,
    timeframe: Literal["weekly", "monthly", "allTime"] = "weekly",
    limit: int = Query(10, ge=1),
):
    return _services(request).voting.get_leaderboard(timeframe, limit)


@router.get("/bitlings/{bitling_id}", response_model=ProposalWithStats)
def get_bitling(bitling_id: str, request: Request):
    return _services(request).proposals.get(bitling_id)


@router.post("/bitlings/{bitling_id}/generate-stats", response_model=GeneratedBundle)
def generate_bitling_stats(bitling_id: str, request: Request):
    return _services(request).proposals.generate_stats(bitling_id)


@router.post("/bitlings/{bitling_id}/open-voting", response_model=Proposal)
def open_voting(bitling_id: str, request: Request):
    return _services(request).voting.open_voting(bitling_id)


@router.patch("/bitlings/{bitling_id}/status", response_model=Proposal)
def update_status(bitling_id: str, payload: StatusUpdate, request: Request):
    return _services(request).voting.set_status(bitling_id, payload.status)


# Voting

@router.post("/vote", response_model=VoteResponse)
def vote(
    payload: VoteRequest,
    request: Request,
    x_user_id: Optional[str] = Header(None),
):
    voter_identity = request.client.host if request.client else "unknown"
    result = _services(request).voting.cast_vote(
        payload.proposal_id, voter_identity, payload.value, user_id=x_user_id
    )
    message = "Vote recorded successfully" if result.created else "Vote updated successfully"
    return VoteResponse(message=message, bitling=result.proposal, promoted=result.promoted)


# Generation

@router.post("/generate-stats", response_model=GeneratedBundle)
def generate_stats(payload: GenerateStatsRequest, request: Request):
    return _services(request).generator.generate(payload.name, payload.description, payload.image_url)


@router.post("/generate-image", response_model=ImageResponse)
def generate_image(payload: GenerateImageRequest, request: Request):
    return ImageResponse(url=_services(request).generator.generate_image(payload.prompt))


# Collection

@router.get("/collection", response_model=List[CollectionEntry])
def get_collection(request: Request, user_id: Optional[str] = Query(None, alias="userId")):
    services = _services(request)
    return services.collection.get_collection(user_id or services.collection.default_user_id)


@router.get("/collection/stats", response_model=CollectionStats)
def get_collection_stats(request: Request, user_id: Optional[str] = Query(None, alias="userId")):
    services = _services(request)
    return services.collection.get_collection_stats(user_id or services.collection.default_user_id)


@router.post("/collection", status_code=201, response_model=CollectionEntry)
def collect(payload: CollectRequest, request: Request):
    services = _services(request)
    return services.collection.materialize(
        payload.user_id or services.collection.default_user_id,
        payload.proposal_id,
        nickname=payload.nickname,
    )
