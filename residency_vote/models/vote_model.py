from pydantic import BaseModel, ConfigDict, Field
from typing import Union

from residency_vote.models.address_model import AccountAddress, ContractAddress
from residency_vote.schemas import HexSignature, Utf8Str


class VoteParameter(BaseModel):
    """A vote together with the verifier's signature over (sender address, country code)."""
    model_config = ConfigDict(populate_by_name=True)

    country_code: Utf8Str = Field(..., alias="countryCode")
    signature: HexSignature


class CastVote(VoteParameter):
    # The development chain takes the transaction sender from the request body.
    sender: Union[AccountAddress, ContractAddress]
