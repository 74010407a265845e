import json

import pytest

from residency_vote.chain_host import ContractHost, ElectionAlreadyInitialized, ElectionNotInitialized
from residency_vote.models.address_model import ContractAddress
from residency_vote.models.election_model import InitParameter
from residency_vote.models.vote_model import VoteParameter
from residency_vote.security import sign_attestation
from residency_vote.serialization import ParseError, decode_voting_view, encode_init_parameter
from residency_vote.storage import JsonFileStore, MongoStore
from residency_vote.voting_contract import VotingError, VotingRejection

from conftest import ACC_0, ACC_1, CHRISTMAS_EVE_EPOCH, FakeClock


@pytest.fixture
def init_param(verifier_public_key):
    return InitParameter(
        description="EuroVision",
        options=["DK", "DE", "IT"],
        end_time=CHRISTMAS_EVE_EPOCH,
        verifier_public_key=verifier_public_key,
    )


def signed_vote(signing_key, address, code):
    return VoteParameter(country_code=code, signature=sign_attestation(signing_key, address, code))


def test_vote_and_view(host, init_param, signing_key):
    host.init_election(init_param)
    host.vote(ACC_0, signed_vote(signing_key, ACC_0, "DE"))
    host.vote(ACC_1, signed_vote(signing_key, ACC_1, "DK"))
    host.vote(ACC_0, signed_vote(signing_key, ACC_0, "DK"))

    view = host.view()
    assert view.tally == {"DK": 2}
    assert view.end_time == CHRISTMAS_EVE_EPOCH


def test_view_is_returned_as_bytes(host, init_param):
    host.init_election(init_param)
    raw = host.invoke("view")
    assert decode_voting_view(raw).description == "EuroVision"


def test_garbage_parameter_fails_parsing(host, init_param):
    host.init_election(init_param)
    with pytest.raises(VotingError) as excinfo:
        host.update("vote", ACC_0, b"\x02\x00")
    assert excinfo.value.rejection == VotingRejection.PARSING_FAILED


def test_deadline_checked_before_parsing(host, clock, init_param):
    host.init_election(init_param)
    clock.now = CHRISTMAS_EVE_EPOCH + 1
    with pytest.raises(VotingError) as excinfo:
        host.update("vote", ACC_0, b"garbage")
    assert excinfo.value.rejection == VotingRejection.VOTING_FINISHED


def test_contract_sender_checked_before_parsing(host, init_param):
    host.init_election(init_param)
    with pytest.raises(VotingError) as excinfo:
        host.update("vote", ContractAddress(index=1), b"garbage")
    assert excinfo.value.rejection == VotingRejection.CONTRACT_VOTER


def test_clock_is_read_per_update(host, clock, init_param, signing_key):
    host.init_election(init_param)
    host.vote(ACC_0, signed_vote(signing_key, ACC_0, "DE"))
    clock.now = CHRISTMAS_EVE_EPOCH + 1
    with pytest.raises(VotingError):
        host.vote(ACC_1, signed_vote(signing_key, ACC_1, "DE"))
    assert host.view().tally == {"DE": 1}


def test_init_only_once(host, init_param):
    host.init_election(init_param)
    with pytest.raises(ElectionAlreadyInitialized):
        host.init_election(init_param)


def test_init_with_truncated_parameter(host, init_param):
    with pytest.raises(ParseError):
        host.init(encode_init_parameter(init_param)[:-1])
    assert not host.initialized


def test_vote_before_init(host, signing_key):
    with pytest.raises(ElectionNotInitialized):
        host.vote(ACC_0, signed_vote(signing_key, ACC_0, "DE"))


def test_unknown_entrypoint(host, init_param):
    host.init_election(init_param)
    with pytest.raises(ValueError):
        host.update("transfer", ACC_0, b"")


def test_json_store_persists_only_accepted_votes(tmp_path, init_param, signing_key):
    path = tmp_path / "election.json"
    host = ContractHost(JsonFileStore(str(path), election_id="eurovision"), clock=FakeClock(0))
    host.init_election(init_param)
    host.vote(ACC_0, signed_vote(signing_key, ACC_0, "IT"))
    with pytest.raises(VotingError):
        host.vote(ACC_1, VoteParameter(country_code="DK", signature=bytes(64)))

    doc = json.loads(path.read_text())["elections"]["eurovision"]
    assert doc["ballots"] == {str(ACC_0): 2}

    reloaded = ContractHost(JsonFileStore(str(path), election_id="eurovision"), clock=FakeClock(0))
    assert reloaded.view().tally == {"IT": 1}


def test_json_store_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "election.json"
    path.write_text("{not json")
    assert JsonFileStore(str(path)).load() is None


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def find_one(self, query):
        doc = self.docs.get(query["_id"])
        return dict(doc, _id=query["_id"]) if doc is not None else None

    def replace_one(self, query, doc, upsert=False):
        assert upsert
        self.docs[query["_id"]] = dict(doc)


def test_mongo_store_round_trip(init_param, signing_key):
    collection = FakeCollection()
    host = ContractHost(MongoStore(election_id="eurovision", collection=collection), clock=FakeClock(0))
    host.init_election(init_param)
    host.vote(ACC_1, signed_vote(signing_key, ACC_1, "DE"))

    assert collection.docs["eurovision"]["options"] == ["DK", "DE", "IT"]
    reloaded = ContractHost(MongoStore(election_id="eurovision", collection=collection), clock=FakeClock(0))
    assert reloaded.view().tally == {"DE": 1}
