from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, PlainSerializer

from residency_vote.models.address_model import AccountAddress
from residency_vote.models.statement_model import Statement

CREDENTIAL_ID_SIZE = 48
SIGNATURE_SIZE = 64
PUBLIC_KEY_SIZE = 32
U64_MAX = 2**64 - 1


def _hex_bytes(size: int):
    def parse(value: Any) -> bytes:
        if isinstance(value, bytes):
            raw = value
        elif isinstance(value, str):
            try:
                raw = bytes.fromhex(value)
            except ValueError:
                raise ValueError("expected a hex string")
        else:
            raise ValueError("expected a hex string")
        if len(raw) != size:
            raise ValueError(f"expected {size} bytes, got {len(raw)}")
        return raw
    return parse


CredentialId = Annotated[bytes, BeforeValidator(_hex_bytes(CREDENTIAL_ID_SIZE)), PlainSerializer(lambda raw: raw.hex(), return_type=str)]
HexSignature = Annotated[bytes, BeforeValidator(_hex_bytes(SIGNATURE_SIZE)), PlainSerializer(lambda raw: raw.hex(), return_type=str)]
PublicKeyHex = Annotated[bytes, BeforeValidator(_hex_bytes(PUBLIC_KEY_SIZE)), PlainSerializer(lambda raw: raw.hex(), return_type=str)]


def _utf8_encodable(value: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError("string is not valid UTF-8")
    return value


# Strings that go into the contract's binary encoding
Utf8Str = Annotated[str, AfterValidator(_utf8_encodable)]


class VersionedProof(BaseModel):
    v: int
    value: Any


class ProofWithContext(BaseModel):
    credential: CredentialId
    proof: VersionedProof


class ProofRequest(BaseModel):
    statement: Statement
    address: AccountAddress
    proof: ProofWithContext


class SignatureResponse(BaseModel):
    signature: HexSignature


class ErrorResponse(BaseModel):
    """Body of every error reply; `code` repeats the HTTP status."""
    message: str
    code: int
