import logging
from datetime import timedelta
from typing import Callable, List, Optional, Union

from bitlings.database.db_manager import DBManager
from bitlings.errors import ConflictError, DuplicateVoteError, ValidationError
from bitlings.models.creature_type import ProposalStatus
from bitlings.models.proposal import Proposal
from bitlings.models.vote import VoteResult
from bitlings.utils.keyed_lock import KeyedLock

logger = logging.getLogger(__name__)

DEFAULT_APPROVAL_THRESHOLD = 10

TIMEFRAME_WINDOWS = {
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
    "allTime": None,
}

PromotionListener = Callable[[Proposal], None]


class VotingService:
    """
    One vote per identity per proposal, tally maintenance, and the automatic
    `voting -> accepted` promotion.

    Everything from reading the existing vote to firing promotion listeners
    runs under a per-proposal lock and a single store transaction.
    """

    def __init__(self, db: DBManager, approval_threshold: int = DEFAULT_APPROVAL_THRESHOLD):
        if approval_threshold < 1:
            raise ValueError("approval_threshold must be positive")
        self.db = db
        self.approval_threshold = approval_threshold
        self._locks = KeyedLock()
        self._listeners: List[PromotionListener] = []

    def add_promotion_listener(self, listener: PromotionListener):
        """Listeners run once per promotion, inside the vote's transaction."""
        self._listeners.append(listener)

    def cast_vote(
        self,
        proposal_id: str,
        voter_identity: str,
        value: int,
        user_id: Optional[str] = None,
    ) -> VoteResult:
        # bool and float are rejected even when they compare equal to 1 or -1
        if type(value) is not int or value not in (1, -1):
            raise ValidationError("Vote value must be 1 or -1")
        if not voter_identity:
            raise ValidationError("Missing voter identity")

        with self._locks.hold(proposal_id), self.db.transaction():
            self.db.proposals.require(proposal_id)
            existing = self.db.votes.get_by_voter(voter_identity, proposal_id)

            if existing is None:
                vote = self.db.votes.create(proposal_id, voter_identity, value, user_id=user_id)
                created = True
                up_delta, down_delta = (1, 0) if value > 0 else (0, 1)
            elif existing.value == value:
                raise DuplicateVoteError("You've already voted this way")
            else:
                vote = self.db.votes.update_value(existing.id, value)
                created = False
                # Flip: one tally loses the old vote, the other gains the new one
                up_delta, down_delta = (1, -1) if value > 0 else (-1, 1)

            proposal = self.db.proposals.apply_vote_delta(proposal_id, up_delta, down_delta)
            promoted = self.promote_if_eligible(proposal)
            if promoted:
                proposal = self.db.proposals.require(proposal_id)
                for listener in self._listeners:
                    listener(proposal)

        logger.debug(
            f"Vote {value:+d} by {voter_identity} on {proposal_id}: "
            f"up={proposal.upvotes} down={proposal.downvotes} net={proposal.votes}"
        )
        return VoteResult(vote=vote, proposal=proposal, created=created, promoted=promoted)

    def promote_if_eligible(self, proposal: Proposal) -> bool:
        """
        The `voting -> accepted` transition. Returns True only when this call
        performed it; an already accepted proposal never transitions again.
        """
        if proposal.status != ProposalStatus.VOTING:
            return False
        if proposal.votes < self.approval_threshold:
            return False
        self.db.proposals.set_status(proposal.id, ProposalStatus.ACCEPTED)
        logger.info(
            f"Bitling '{proposal.name}' ({proposal.id}) accepted with {proposal.votes} net votes"
        )
        return True

    def open_voting(self, proposal_id: str) -> Proposal:
        """Administrative `proposed -> voting` step."""
        with self._locks.hold(proposal_id), self.db.transaction():
            proposal = self.db.proposals.require(proposal_id)
            if proposal.status != ProposalStatus.PROPOSED:
                raise ConflictError(
                    f"Only proposed Bitlings can open for voting (status is {proposal.status.value})"
                )
            proposal = self.db.proposals.set_status(proposal_id, ProposalStatus.VOTING)
        logger.info(f"Voting opened for '{proposal.name}' ({proposal_id})")
        return proposal

    def set_status(self, proposal_id: str, status: Union[str, ProposalStatus]) -> Proposal:
        """Administrative override. Does not fire promotion listeners."""
        with self._locks.hold(proposal_id):
            proposal = self.db.proposals.set_status(proposal_id, status)
        logger.info(f"Status of {proposal_id} set to {proposal.status.value}")
        return proposal

    def get_leaderboard(self, timeframe: str = "weekly", limit: int = 10) -> List[Proposal]:
        if timeframe not in TIMEFRAME_WINDOWS:
            raise ValidationError(
                f"Unknown timeframe {timeframe!r}, expected one of {list(TIMEFRAME_WINDOWS)}"
            )
        if limit < 1:
            raise ValidationError("limit must be positive")
        window = TIMEFRAME_WINDOWS[timeframe]
        since = self.db.clock() - window if window is not None else None
        return self.db.proposals.leaderboard(since, limit)
