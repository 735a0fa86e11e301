"""Referral aggregate - a customer referral with its optional mortgage sub-record."""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Mortgage(BaseModel):
    model_config = _CAMEL

    mortgage_number: str = ""
    mortgage_type: str = ""
    referral_id: str = ""
    rate: str = ""
    amount: str = ""


class Referral(BaseModel):
    """A referral as stored in the ledger.

    Serialized with camelCase keys. Fields not declared here are kept as-is so a
    record round-trips through the store without losing client data.
    """

    model_config = _CAMEL

    referral_id: str = ""
    customer_name: str = ""
    contact_number: str = ""
    customer_id: str = ""
    employee_id: str = ""
    departments: list[str] = Field(default_factory=list)
    create_date: int = 0
    status: str = ""
    mortgage: Mortgage | None = None

    @classmethod
    def from_bytes(cls, value: bytes) -> "Referral":
        """Parse stored bytes. Raises pydantic.ValidationError on bad input."""
        return cls.model_validate_json(value)

    def to_bytes(self) -> bytes:
        """Serialize the fields the client sent, plus any set since, nulls included."""
        return self.model_dump_json(by_alias=True, exclude_unset=True).encode("utf-8")

    def with_status(self, status: str) -> "Referral":
        return self.model_copy(update={"status": status})


_REFERRAL_LIST = TypeAdapter(list[Referral])


def parse_referral_array(payload: bytes) -> list[Referral]:
    """Parse a JSON array of stored referrals, as returned by a bucket search."""
    return _REFERRAL_LIST.validate_json(payload)
