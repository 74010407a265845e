import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from residency_vote.config import MAX_BODY_BYTES
from residency_vote.exceptions import ProofError
from residency_vote.schemas import ProofRequest, SignatureResponse
from residency_vote.verification import Server, check_proof

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Verifier"])


def get_server(request: Request) -> Server:
    return request.app.state.server


async def limit_body_size(request: Request):
    length = request.headers.get("content-length")
    if length is not None and (not length.isdigit() or int(length) > MAX_BODY_BYTES):
        raise HTTPException(status_code=400, detail="Malformed body.")
    # Chunked requests carry no length; the body is already buffered for parsing.
    if len(await request.body()) > MAX_BODY_BYTES:
        raise HTTPException(status_code=400, detail="Malformed body.")


@router.post("/prove", response_model=SignatureResponse, dependencies=[Depends(limit_body_size)])
def provide_proof(proof_request: ProofRequest, server: Server = Depends(get_server)):
    """
    Verify a proof that the account does not reside in a given country.
    Returns the verifier's signature over (address, country code), hex encoded.
    """
    logger.info(f"Got a ProofRequest for {proof_request.address}")
    try:
        signature = check_proof(server, proof_request)
    except ProofError as e:
        logger.warning(f"Request is invalid: {e!r}")
        raise
    return SignatureResponse(signature=signature)
