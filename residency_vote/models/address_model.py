from typing import Any, Union

import base58
from pydantic import BaseModel, ConfigDict
from pydantic_core import core_schema

ACCOUNT_ADDRESS_SIZE = 32
ACCOUNT_ADDRESS_VERSION = 1


class AccountAddress:
    """
    Address of an individual account on chain.
    Holds the 32 raw bytes; the textual form is base58check with version byte 1.
    """

    __slots__ = ("raw",)

    def __init__(self, raw: bytes):
        raw = bytes(raw)
        if len(raw) != ACCOUNT_ADDRESS_SIZE:
            raise ValueError(f"account address must be {ACCOUNT_ADDRESS_SIZE} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    def __setattr__(self, name, value):
        raise AttributeError("AccountAddress is immutable")

    @classmethod
    def from_base58(cls, text: str) -> "AccountAddress":
        try:
            decoded = base58.b58decode_check(text)
        except ValueError as e:
            raise ValueError(f"invalid account address {text!r}: {e}")
        if len(decoded) != ACCOUNT_ADDRESS_SIZE + 1 or decoded[0] != ACCOUNT_ADDRESS_VERSION:
            raise ValueError(f"invalid account address {text!r}")
        return cls(decoded[1:])

    def to_base58(self) -> str:
        return base58.b58encode_check(bytes([ACCOUNT_ADDRESS_VERSION]) + self.raw).decode("ascii")

    def __str__(self) -> str:
        return self.to_base58()

    def __repr__(self) -> str:
        return f"AccountAddress({self.to_base58()!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, AccountAddress) and other.raw == self.raw

    def __lt__(self, other: "AccountAddress") -> bool:
        return self.raw < other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __reduce__(self):
        return (AccountAddress, (self.raw,))

    @classmethod
    def _validate(cls, value: Any) -> "AccountAddress":
        if isinstance(value, AccountAddress):
            return value
        if isinstance(value, str):
            return cls.from_base58(value)
        raise ValueError("account address must be a base58 string")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {"type": "string", "format": "base58check"}


class ContractAddress(BaseModel):
    """Address of a smart contract instance."""
    model_config = ConfigDict(frozen=True)

    index: int
    subindex: int = 0


# The sender of a transaction: either an account or a contract.
Address = Union[AccountAddress, ContractAddress]
