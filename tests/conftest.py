import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from fastapi.testclient import TestClient

from residency_vote.chain_host import ContractHost
from residency_vote.exceptions import NodeAccessError
from residency_vote.main import create_app
from residency_vote.models.address_model import AccountAddress
from residency_vote.node_client import AccountCredential
from residency_vote.routes.election_routes import get_host
from residency_vote.routes.prove_routes import get_server
from residency_vote.security import public_key_bytes
from residency_vote.storage import MemoryStore
from residency_vote.verification import Server

ACC_0 = AccountAddress(bytes([0] * 32))
ACC_1 = AccountAddress(bytes([1] * 32))
CRED_ID = bytes(range(48))
COMMITMENTS = {"cmmAttributes": {"countryOfResidence": "aa" * 48}}
# Noon on Christmas eve 2023, in milliseconds
CHRISTMAS_EVE_EPOCH = 1703419200000


class FakeNodeClient:
    def __init__(self):
        self.credentials = {}
        self.error = None
        self.calls = []

    def get_account_credential(self, address, index=0):
        self.calls.append((address, index))
        if self.error is not None:
            raise NodeAccessError(self.error)
        return self.credentials.get((address, index))

    def get_cryptographic_parameters(self):
        return {"genesisString": "test"}


class FakePrimitive:
    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def verify(self, challenge, global_context, credential_id, commitments, statement, proof):
        self.calls.append((challenge, global_context, credential_id, commitments, statement, proof))
        return self.result


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def not_in_set_statement(*codes, tag="countryOfResidence"):
    return [{"type": "AttributeNotInSet", "attributeTag": tag, "set": list(codes)}]


def proof_request_body(address=ACC_0, statement=None, credential=CRED_ID):
    return {
        "statement": statement if statement is not None else not_in_set_statement("DK"),
        "address": str(address),
        "proof": {"credential": credential.hex(), "proof": {"v": 0, "value": {"proofs": []}}},
    }


@pytest.fixture
def signing_key():
    return Ed25519PrivateKey.generate()


@pytest.fixture
def verifier_public_key(signing_key):
    return public_key_bytes(signing_key.public_key())


@pytest.fixture
def node_client():
    client = FakeNodeClient()
    client.credentials[(ACC_0, 0)] = AccountCredential(kind="normal", cred_id=CRED_ID, commitments=COMMITMENTS)
    return client


@pytest.fixture
def primitive():
    return FakePrimitive()


@pytest.fixture
def server(signing_key, node_client, primitive):
    return Server(
        signing_key=signing_key,
        global_context={"genesisString": "test"},
        node_client=node_client,
        primitive=primitive,
    )


@pytest.fixture
def clock():
    return FakeClock(0)


@pytest.fixture
def host(clock):
    return ContractHost(MemoryStore(), clock=clock)


@pytest.fixture
def client(server, host):
    app = create_app(enable_dev_chain=True)
    app.dependency_overrides[get_server] = lambda: server
    app.dependency_overrides[get_host] = lambda: host
    return TestClient(app)
