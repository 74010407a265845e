# residency_vote/voting_contract.py
"""
Election state machine.

An election has a description, a list of voting options (country codes) and an
end time. Only accounts can vote, and each account may change its vote as often
as it likes until the end time. A vote is accepted only together with the
verifier's signature over (sender address, country code), which attests that the
sender does *not* live in the country voted for.

Transitions run one at a time on a single state object. A rejected vote leaves
the state untouched.
"""
import copy
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from residency_vote.models.address_model import AccountAddress, ContractAddress
from residency_vote.models.election_model import InitParameter, VotingOption, VotingView
from residency_vote.models.vote_model import VoteParameter
from residency_vote.security import verify_attestation
from residency_vote.serialization import ParseError, decode_vote_parameter


class VotingRejection(str, Enum):
    PARSING_FAILED = "ParsingFailed"
    VOTING_FINISHED = "VotingFinished"
    INVALID_VOTING_OPTION = "InvalidVotingOption"
    CONTRACT_VOTER = "ContractVoter"
    INVALID_SIGNATURE = "InvalidSignature"


class VotingError(Exception):
    def __init__(self, rejection: VotingRejection):
        super().__init__(rejection.value)
        self.rejection = rejection


@dataclass
class ElectionState:
    description: str
    verifier_public_key: bytes
    options: List[VotingOption]
    # Milliseconds since the epoch
    end_time: int
    ballots: Dict[AccountAddress, int] = field(default_factory=dict)

    def to_document(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "verifier_public_key": self.verifier_public_key.hex(),
            "options": list(self.options),
            "end_time": self.end_time,
            "ballots": {str(address): index for address, index in self.ballots.items()},
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ElectionState":
        return cls(
            description=doc["description"],
            verifier_public_key=bytes.fromhex(doc["verifier_public_key"]),
            options=list(doc["options"]),
            end_time=int(doc["end_time"]),
            ballots={AccountAddress.from_base58(a): int(i) for a, i in doc.get("ballots", {}).items()},
        )

    def copy(self) -> "ElectionState":
        return copy.deepcopy(self)


@dataclass(frozen=True)
class ReceiveContext:
    """What the host tells a transition about the current transaction."""
    sender: Union[AccountAddress, ContractAddress]
    slot_time: int


def init(param: InitParameter) -> ElectionState:
    # An empty option list is accepted; such an election can never receive a vote.
    return ElectionState(
        description=param.description,
        verifier_public_key=param.verifier_public_key,
        options=list(param.options),
        end_time=param.end_time,
    )


def _check_can_vote(state: ElectionState, ctx: ReceiveContext) -> AccountAddress:
    if ctx.slot_time > state.end_time:
        raise VotingError(VotingRejection.VOTING_FINISHED)
    if not isinstance(ctx.sender, AccountAddress):
        raise VotingError(VotingRejection.CONTRACT_VOTER)
    return ctx.sender


def _apply_vote(state: ElectionState, account: AccountAddress, param: VoteParameter) -> None:
    try:
        vote_index = state.options.index(param.country_code)
    except ValueError:
        raise VotingError(VotingRejection.INVALID_VOTING_OPTION)

    public_key = Ed25519PublicKey.from_public_bytes(state.verifier_public_key)
    if not verify_attestation(public_key, account, param.country_code, param.signature):
        raise VotingError(VotingRejection.INVALID_SIGNATURE)

    state.ballots[account] = vote_index


def vote(state: ElectionState, ctx: ReceiveContext, param: VoteParameter) -> None:
    """
    Insert or replace the sender's ballot.

    Rejects, in this order, when:
    - the slot time is past the end time,
    - the sender is a contract,
    - the country code is not one of the options,
    - the signature does not verify against (sender, country code).
    """
    account = _check_can_vote(state, ctx)
    _apply_vote(state, account, param)


def receive_vote(state: ElectionState, ctx: ReceiveContext, parameter: bytes) -> None:
    """Same as vote(), for a serialized parameter. Decoding happens after the time and sender checks."""
    account = _check_can_vote(state, ctx)
    try:
        param = decode_vote_parameter(parameter)
    except ParseError:
        raise VotingError(VotingRejection.PARSING_FAILED)
    _apply_vote(state, account, param)


def compute_tally(options: List[VotingOption], ballots: Dict[AccountAddress, int]) -> Dict[VotingOption, int]:
    # Linear in the number of ballots.
    counts = Counter(options[index] for index in ballots.values())
    return {option: counts[option] for option in sorted(counts)}


def view(state: ElectionState) -> VotingView:
    return VotingView(
        description=state.description,
        end_time=state.end_time,
        tally=compute_tally(state.options, state.ballots),
    )
