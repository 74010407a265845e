from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, RootModel

# Attribute names in the order of their tags
ATTRIBUTE_NAMES = [
    "firstName",
    "lastName",
    "sex",
    "dob",
    "countryOfResidence",
    "nationality",
    "idDocType",
    "idDocNo",
    "idDocIssuer",
    "idDocIssuedAt",
    "idDocExpiresAt",
    "nationalIdNo",
    "taxIdNo",
    "lei",
    "legalName",
    "legalCountry",
    "businessNumber",
    "registrationAuth",
]


def _parse_attribute_tag(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("attribute tag must be a name or an integer")
    if isinstance(value, int):
        if not 0 <= value <= 255:
            raise ValueError(f"attribute tag out of range: {value}")
        return value
    if isinstance(value, str):
        if value in ATTRIBUTE_NAMES:
            return ATTRIBUTE_NAMES.index(value)
        raise ValueError(f"unknown attribute name: {value}")
    raise ValueError("attribute tag must be a name or an integer")


def _attribute_tag_name(tag: int) -> Union[str, int]:
    if tag < len(ATTRIBUTE_NAMES):
        return ATTRIBUTE_NAMES[tag]
    return tag


AttributeTag = Annotated[int, BeforeValidator(_parse_attribute_tag), PlainSerializer(_attribute_tag_name)]


class _AtomicStatementBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attribute_tag: AttributeTag = Field(alias="attributeTag")


class RevealAttribute(_AtomicStatementBase):
    type: Literal["RevealAttribute"] = "RevealAttribute"


class AttributeInRange(_AtomicStatementBase):
    type: Literal["AttributeInRange"] = "AttributeInRange"
    lower: str
    upper: str


class AttributeInSet(_AtomicStatementBase):
    type: Literal["AttributeInSet"] = "AttributeInSet"
    values: List[str] = Field(alias="set")


class AttributeNotInSet(_AtomicStatementBase):
    type: Literal["AttributeNotInSet"] = "AttributeNotInSet"
    values: List[str] = Field(alias="set")


AtomicStatement = Annotated[
    Union[RevealAttribute, AttributeInRange, AttributeInSet, AttributeNotInSet],
    Field(discriminator="type"),
]


class Statement(RootModel[List[AtomicStatement]]):
    """An ordered list of atomic claims about hidden identity attributes."""

    @property
    def statements(self) -> List[Any]:
        return self.root
