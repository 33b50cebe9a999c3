from dataclasses import dataclass
from typing import Optional

from bitlings.models.proposal import Proposal


@dataclass
class Vote:
    id: str
    proposal_id: str
    voter_identity: str
    value: int
    created_at: str
    user_id: Optional[str] = None


@dataclass
class VoteResult:
    vote: Vote
    proposal: Proposal
    created: bool  # False when an existing vote was flipped
    promoted: bool
