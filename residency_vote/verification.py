# residency_vote/verification.py
# Checks a proof request and, when it holds, signs (address, country code).
import logging
from dataclasses import dataclass
from typing import Any, Dict

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from residency_vote.config import CHALLENGE, COUNTRY_OF_RESIDENCY
from residency_vote.exceptions import CredentialError, InvalidProofs, NotAllowed, StatementNotAllowed
from residency_vote.models.statement_model import AttributeNotInSet, Statement
from residency_vote.node_client import CREDENTIAL_INITIAL, CREDENTIAL_NORMAL, NodeClient
from residency_vote.primitives import ProofPrimitive
from residency_vote.schemas import ProofRequest
from residency_vote.security import COUNTRY_CODE_SIZE, sign_attestation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Server:
    """State shared by all requests. Loaded once at startup and never mutated."""
    signing_key: Ed25519PrivateKey
    global_context: Dict[str, Any]
    node_client: NodeClient
    primitive: ProofPrimitive


def validate_statement(statement: Statement) -> str:
    """
    Accept only "the account does not reside in country X":
    a single AttributeNotInSet claim over country of residence, with one two-byte code.
    Returns the country code.
    """
    if len(statement.statements) != 1:
        raise StatementNotAllowed()
    atomic = statement.statements[0]

    if isinstance(atomic, AttributeNotInSet):
        if atomic.attribute_tag != COUNTRY_OF_RESIDENCY:
            raise StatementNotAllowed()
        if len(atomic.values) != 1:
            raise StatementNotAllowed()
        country_code = atomic.values[0]
        try:
            encoded = country_code.encode("utf-8")
        except UnicodeEncodeError:
            raise StatementNotAllowed()
        if len(encoded) != COUNTRY_CODE_SIZE:
            raise StatementNotAllowed()
        return country_code

    raise StatementNotAllowed()


def verify_proof(server: Server, request: ProofRequest) -> None:
    """Verify the proof against the commitments of the account's first credential."""
    cred_id = request.proof.credential

    # TODO The account may have more than one credential, check the remaining ones.
    credential = server.node_client.get_account_credential(request.address, 0)
    if credential is None:
        raise CredentialError()
    if credential.cred_id != cred_id:
        raise CredentialError()

    if credential.kind == CREDENTIAL_INITIAL:
        raise NotAllowed()
    elif credential.kind == CREDENTIAL_NORMAL:
        commitments = credential.commitments
    else:
        raise CredentialError()

    verified = server.primitive.verify(
        CHALLENGE,
        server.global_context,
        cred_id,
        commitments,
        request.statement,
        request.proof.proof.value,
    )
    if not verified:
        raise InvalidProofs()


def check_proof(server: Server, request: ProofRequest) -> bytes:
    """
    Full pipeline for one request: statement shape, then the proof, then the signature.
    The shape check runs first so malformed statements never reach the node.
    """
    country_code = validate_statement(request.statement)
    verify_proof(server, request)
    signature = sign_attestation(server.signing_key, request.address, country_code)
    logger.info(f"Issued attestation for {request.address} not residing in {country_code}")
    return signature
