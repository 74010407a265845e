# residency_vote/serialization.py
# Binary encoding of contract parameters and return values.
#
#   String          u32 LE byte length, then UTF-8 bytes
#   list / map      u32 LE element count, then the elements
#   Timestamp       u64 LE milliseconds
#   public key      32 raw bytes
#   signature       64 raw bytes
import struct
from typing import Dict, List

from residency_vote.models.election_model import InitParameter, VotingView
from residency_vote.models.vote_model import VoteParameter
from residency_vote.schemas import PUBLIC_KEY_SIZE, SIGNATURE_SIZE


class ParseError(ValueError):
    pass


class _Reader:
    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise ParseError(f"unexpected end of input at byte {self.pos}, wanted {n} more")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    def string(self) -> str:
        raw = self.take(self.u32())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"invalid UTF-8 string: {e}")

    def finish(self) -> None:
        if self.pos != len(self.data):
            raise ParseError(f"{len(self.data) - self.pos} trailing bytes")


def _string(value: str) -> bytes:
    raw = value.encode("utf-8")
    return struct.pack("<I", len(raw)) + raw


def _string_list(values: List[str]) -> bytes:
    return struct.pack("<I", len(values)) + b"".join(_string(v) for v in values)


def encode_init_parameter(param: InitParameter) -> bytes:
    return (
        _string(param.description)
        + _string_list(param.options)
        + struct.pack("<Q", param.end_time)
        + param.verifier_public_key
    )


def decode_init_parameter(data: bytes) -> InitParameter:
    reader = _Reader(data)
    description = reader.string()
    options = [reader.string() for _ in range(reader.u32())]
    end_time = reader.u64()
    public_key = reader.take(PUBLIC_KEY_SIZE)
    reader.finish()
    return InitParameter(
        description=description,
        options=options,
        end_time=end_time,
        verifier_public_key=public_key,
    )


def encode_vote_parameter(param: VoteParameter) -> bytes:
    return _string(param.country_code) + param.signature


def decode_vote_parameter(data: bytes) -> VoteParameter:
    reader = _Reader(data)
    country_code = reader.string()
    signature = reader.take(SIGNATURE_SIZE)
    reader.finish()
    return VoteParameter(country_code=country_code, signature=signature)


def encode_voting_view(view: VotingView) -> bytes:
    tally: Dict[str, int] = view.tally
    out = _string(view.description) + struct.pack("<Q", view.end_time)
    out += struct.pack("<I", len(tally))
    for option in sorted(tally):
        out += _string(option) + struct.pack("<I", tally[option])
    return out


def decode_voting_view(data: bytes) -> VotingView:
    reader = _Reader(data)
    description = reader.string()
    end_time = reader.u64()
    tally = {}
    for _ in range(reader.u32()):
        option = reader.string()
        tally[option] = reader.u32()
    reader.finish()
    return VotingView(description=description, end_time=end_time, tally=tally)
