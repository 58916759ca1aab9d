"""
Pydantic models for the records of the four pouet.net data dumps.

The dumps are produced by PHP and are loosely typed: ids and counters arrive
as strings, missing values as empty strings, and an empty object is sometimes
serialized as an empty list. These models canonicalize all of that at parse
time so that only well-formed records ever reach the loader.
"""

from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _empty_list_to_dict(value: Any) -> Any:
    if value is None or value == []:
        return {}
    return value


def _empty_to_none(value: Any) -> Any:
    if value in ("", [], {}):
        return None
    return value


def _reference_id(value: Any) -> Any:
    """Reduces an embedded object to its id; keeps plain ids as they are."""
    if isinstance(value, dict):
        return _blank_to_none(value.get("id"))
    return _blank_to_none(value)


OptionalInt = Annotated[Optional[int], BeforeValidator(_blank_to_none)]
OptionalFloat = Annotated[Optional[float], BeforeValidator(_blank_to_none)]
OptionalStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
ReferenceId = Annotated[Optional[int], BeforeValidator(_reference_id)]


class DumpRecord(BaseModel):
    """Common configuration: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(
        populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )


# --- Embedded references ---

class PlatformRef(DumpRecord):
    name: str
    icon: OptionalStr = None
    slug: OptionalStr = None


class UserRef(DumpRecord):
    id: int
    nickname: OptionalStr = None
    level: OptionalStr = None
    avatar: OptionalStr = None
    glops: OptionalInt = None
    register_date: OptionalStr = Field(default=None, alias="registerDate")


class PartyRef(DumpRecord):
    id: int
    name: OptionalStr = None


class GroupRef(DumpRecord):
    id: int
    name: OptionalStr = None


OptionalUser = Annotated[Optional[UserRef], BeforeValidator(_empty_to_none)]

PlatformMap = Annotated[
    Dict[int, PlatformRef], BeforeValidator(_empty_list_to_dict)
]


class Placing(DumpRecord):
    party: Annotated[Optional[PartyRef], BeforeValidator(_empty_to_none)] = None
    compo_name: OptionalStr = None
    ranking: OptionalInt = None
    year: OptionalInt = None


class Credit(DumpRecord):
    user: OptionalUser = None
    role: OptionalStr = None


# --- Dump entities ---

class Party(DumpRecord):
    id: int
    name: str
    web: OptionalStr = None
    added_date: OptionalStr = Field(default=None, alias="addedDate")
    added_user: OptionalUser = Field(default=None, alias="addedUser")


class Group(DumpRecord):
    id: int
    name: str
    acronym: OptionalStr = None
    disambiguation: OptionalStr = None
    web: OptionalStr = None
    added_date: OptionalStr = Field(default=None, alias="addedDate")
    added_user: OptionalUser = Field(default=None, alias="addedUser")
    csdb: OptionalInt = None
    zxdemo: OptionalInt = None
    demozoo: OptionalInt = None


class Board(DumpRecord):
    id: int
    name: str
    added_date: OptionalStr = Field(default=None, alias="addedDate")
    sysop: OptionalStr = None
    phonenumber: OptionalStr = None
    platforms: PlatformMap = Field(default_factory=dict)
    added_user: OptionalUser = Field(default=None, alias="addedUser")


class Prod(DumpRecord):
    id: int
    name: str
    type: OptionalStr = None
    added_date: OptionalStr = Field(default=None, alias="addedDate")
    release_date: OptionalStr = Field(default=None, alias="releaseDate")
    voteup: OptionalInt = None
    votepig: OptionalInt = None
    votedown: OptionalInt = None
    voteavg: OptionalFloat = None
    party_compo: OptionalStr = None
    party_place: OptionalInt = None
    party_year: OptionalInt = None
    party: ReferenceId = None
    invitation: ReferenceId = None
    invitationyear: OptionalInt = None
    board_id: ReferenceId = Field(default=None, alias="boardID")
    rank: OptionalInt = None
    download: OptionalStr = None
    platforms: PlatformMap = Field(default_factory=dict)
    groups: List[GroupRef] = Field(default_factory=list)
    placings: List[Placing] = Field(default_factory=list)
    credits: List[Credit] = Field(default_factory=list)
    added_user: OptionalUser = Field(default=None, alias="addedUser")


RecordT = TypeVar("RecordT", bound=DumpRecord)


class Dump(BaseModel, Generic[RecordT]):
    """The decoded body of one dump: ``{"data": [...]}``."""

    data: List[RecordT]


RECORD_TYPES = {
    "prods": Prod,
    "groups": Group,
    "parties": Party,
    "boards": Board,
}
