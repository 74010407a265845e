import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from residency_vote.chain_host import ContractHost, ElectionAlreadyInitialized, ElectionNotInitialized
from residency_vote.models.election_model import InitParameter, VotingView

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/election", tags=["Election"])


def get_host(request: Request) -> ContractHost:
    return request.app.state.host


@router.post("/init")
def create_election(election: InitParameter, host: ContractHost = Depends(get_host)):
    try:
        host.init_election(election)
    except ElectionAlreadyInitialized:
        raise HTTPException(status_code=409, detail="Election already initialized.")
    return {"message": "Election created successfully!", "options": election.options}


@router.get("/view", response_model=VotingView, response_model_by_alias=True)
def view_election(host: ContractHost = Depends(get_host)):
    try:
        return host.view()
    except ElectionNotInitialized:
        raise HTTPException(status_code=404, detail="Election not found.")
