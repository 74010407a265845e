import json

from residency_vote.node_client import AccountCredential
from residency_vote.security import canonical_message

from conftest import ACC_0, ACC_1, CRED_ID, not_in_set_statement, proof_request_body


def test_prove_returns_hex_signature(client, signing_key):
    r = client.post("/api/prove", json=proof_request_body(statement=not_in_set_statement("IT")))
    assert r.status_code == 200
    signature = bytes.fromhex(r.json()["signature"])
    assert len(signature) == 64
    signing_key.public_key().verify(signature, canonical_message(ACC_0, "IT"))


def test_malformed_body(client):
    r = client.post("/api/prove", json={"address": str(ACC_0)})
    assert r.status_code == 400
    assert r.json() == {"message": "Malformed body.", "code": 400}


def test_invalid_json(client):
    r = client.post("/api/prove", content=b"{", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["message"] == "Malformed body."


def test_bad_address(client):
    body = proof_request_body()
    body["address"] = "not-an-address"
    r = client.post("/api/prove", json=body)
    assert r.status_code == 400


def test_oversized_body(client):
    body = proof_request_body()
    body["proof"]["proof"]["value"] = {"padding": "x" * (60 * 1024)}
    r = client.post("/api/prove", json=body)
    assert r.status_code == 400
    assert r.json()["message"] == "Malformed body."


def test_statement_not_allowed(client, node_client):
    r = client.post("/api/prove", json=proof_request_body(statement=not_in_set_statement("DK", "DE")))
    assert r.status_code == 400
    assert r.json() == {"message": "Statement not allowed.", "code": 400}
    assert node_client.calls == []


def test_invalid_proofs(client, primitive):
    primitive.result = False
    r = client.post("/api/prove", json=proof_request_body())
    assert r.status_code == 400
    assert r.json() == {"message": "Invalid proofs.", "code": 400}


def test_initial_credential_needs_proof(client, node_client):
    node_client.credentials[(ACC_0, 0)] = AccountCredential(kind="initial", cred_id=CRED_ID)
    r = client.post("/api/prove", json=proof_request_body())
    assert r.status_code == 400
    assert r.json() == {"message": "Needs proof.", "code": 400}


def test_node_access_is_server_error(client, node_client):
    node_client.error = "timed out"
    r = client.post("/api/prove", json=proof_request_body())
    assert r.status_code == 500
    assert r.json() == {"message": "Cannot access the node: timed out", "code": 500}


def test_credential_mismatch_is_internal_error(client):
    r = client.post("/api/prove", json=proof_request_body(address=ACC_1))
    assert r.status_code == 500
    assert r.json() == {"message": "Internal error.", "code": 500}


def test_unknown_route(client):
    r = client.get("/api/unknown")
    assert r.status_code == 404
    assert r.json() == {"message": "Not found.", "code": 404}


def test_cors_preflight(client):
    r = client.options(
        "/api/prove",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"


def test_oversized_chunked_body(client):
    body = proof_request_body()
    body["proof"]["proof"]["value"] = {"padding": "x" * (60 * 1024)}
    payload = json.dumps(body).encode()

    def chunks():
        for start in range(0, len(payload), 4096):
            yield payload[start:start + 4096]

    r = client.post("/api/prove", content=chunks(), headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["message"] == "Malformed body."
