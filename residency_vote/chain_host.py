# residency_vote/chain_host.py
"""
Local stand-in for the chain that runs the voting contract.

The host owns the one election state, the slot clock and the store. Updates
execute strictly one after another; each runs against a copy of the state and is
committed (and persisted) only when it succeeds, so a rejected update leaves no
trace. Parameters arrive as bytes, as they do on chain.
"""
import logging
import threading
import time
from typing import Callable, Optional, Union

from residency_vote import voting_contract
from residency_vote.models.address_model import AccountAddress, ContractAddress
from residency_vote.models.election_model import InitParameter, VotingView
from residency_vote.models.vote_model import VoteParameter
from residency_vote.serialization import (
    decode_init_parameter,
    decode_voting_view,
    encode_init_parameter,
    encode_vote_parameter,
    encode_voting_view,
)
from residency_vote.voting_contract import ElectionState, ReceiveContext

logger = logging.getLogger(__name__)


def _wall_clock_millis() -> int:
    return int(time.time() * 1000)


class ElectionNotInitialized(Exception):
    pass


class ElectionAlreadyInitialized(Exception):
    pass


class ContractHost:
    def __init__(self, store, clock: Callable[[], int] = _wall_clock_millis):
        self.store = store
        self.clock = clock
        self._lock = threading.Lock()
        self._state: Optional[ElectionState] = store.load()
        if self._state is not None:
            logger.info(f"Loaded election '{self._state.description}' with {len(self._state.ballots)} ballots")

    @property
    def initialized(self) -> bool:
        return self._state is not None

    def init(self, parameter: bytes) -> None:
        with self._lock:
            if self._state is not None:
                raise ElectionAlreadyInitialized()
            param = decode_init_parameter(parameter)
            state = voting_contract.init(param)
            self.store.save(state)
            self._state = state
            logger.info(f"Initialized election '{state.description}' with options {state.options}")

    def update(self, receive_name: str, sender: Union[AccountAddress, ContractAddress], parameter: bytes) -> None:
        if receive_name != "vote":
            raise ValueError(f"unknown entrypoint: {receive_name}")
        with self._lock:
            if self._state is None:
                raise ElectionNotInitialized()
            ctx = ReceiveContext(sender=sender, slot_time=self.clock())
            working = self._state.copy()
            voting_contract.receive_vote(working, ctx, parameter)
            self.store.save(working)
            self._state = working

    def invoke(self, receive_name: str) -> bytes:
        if receive_name != "view":
            raise ValueError(f"unknown entrypoint: {receive_name}")
        with self._lock:
            if self._state is None:
                raise ElectionNotInitialized()
            return encode_voting_view(voting_contract.view(self._state))

    # --- convenience wrappers taking typed parameters ---

    def init_election(self, param: InitParameter) -> None:
        self.init(encode_init_parameter(param))

    def vote(self, sender: Union[AccountAddress, ContractAddress], param: VoteParameter) -> None:
        self.update("vote", sender, encode_vote_parameter(param))

    def view(self) -> VotingView:
        return decode_voting_view(self.invoke("view"))
