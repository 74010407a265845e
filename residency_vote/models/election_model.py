from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List

from residency_vote.schemas import U64_MAX, PublicKeyHex, Utf8Str

# A voting option is a two-letter country code.
VotingOption = Utf8Str


class InitParameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: Utf8Str = Field(..., examples=["EuroVision"])
    options: List[VotingOption] = Field(..., examples=[["DK", "DE", "IT"]])
    # Last timestamp (milliseconds since the epoch) at which an account can vote.
    end_time: int = Field(..., alias="endTime", ge=0, le=U64_MAX)
    verifier_public_key: PublicKeyHex = Field(..., alias="verifierPublicKey")


class VotingView(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    end_time: int = Field(..., alias="endTime")
    # Option -> number of votes. Options without votes are left out.
    tally: Dict[VotingOption, int]
