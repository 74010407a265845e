import logging

from fastapi import APIRouter, Depends, HTTPException

from residency_vote.chain_host import ContractHost, ElectionNotInitialized
from residency_vote.models.vote_model import CastVote, VoteParameter
from residency_vote.routes.election_routes import get_host
from residency_vote.voting_contract import VotingError

logger = logging.getLogger(__name__)

vote_router = APIRouter(prefix="/vote", tags=["Vote"])


@vote_router.post("/cast")
def cast_vote(vote: CastVote, host: ContractHost = Depends(get_host)):
    """
    Casts or replaces the sender's vote.
    The signature must come from the verifier for (sender, country code).
    """
    param = VoteParameter(country_code=vote.country_code, signature=vote.signature)
    try:
        host.vote(vote.sender, param)
    except ElectionNotInitialized:
        raise HTTPException(status_code=404, detail="Election not found.")
    except VotingError as e:
        logger.warning(f"Vote from {vote.sender} rejected: {e.rejection.value}")
        raise HTTPException(status_code=400, detail=e.rejection.value)

    return {"message": "Vote cast successfully!", "countryCode": vote.country_code}
