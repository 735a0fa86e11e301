"""Index bucket model - the set of record ids stored under one index key.

A bucket value is the record ids joined by a single separator, in insertion
order. Ids therefore may not contain the separator; every id is validated
before it is added to a bucket.
"""

from enum import StrEnum

from refledger.domain.shared.error import InvalidArgumentError, InvalidIdentifierError
from refledger.domain.shared.model.value import ValueObject

DEFAULT_SEPARATOR = ","


class BucketKind(StrEnum):
    STATUS = "status"
    DEPARTMENT = "department"


class BucketKey(ValueObject):
    """Ledger key of an index bucket.

    Renders as ``prefix + name``. With an empty prefix (the default) the key is
    the bare status/department name, which shares the keyspace with record ids.
    """

    kind: BucketKind
    name: str
    prefix: str = ""

    def __str__(self) -> str:
        return f"{self.prefix}{self.name}"


class BucketCodec:
    """Encodes an ordered id sequence to bucket bytes and back."""

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        if len(separator) != 1:
            raise InvalidArgumentError(
                f"Bucket separator must be a single character, got {separator!r}",
                field="separator",
            )
        self.separator = separator

    def validate_id(self, record_id: str) -> str:
        if not record_id:
            raise InvalidIdentifierError("Record id must not be empty", record_id)
        if self.separator in record_id:
            raise InvalidIdentifierError(
                f"Record id {record_id!r} contains the bucket separator {self.separator!r}",
                record_id,
            )
        if record_id != record_id.strip():
            raise InvalidIdentifierError(
                f"Record id {record_id!r} has leading or trailing whitespace", record_id
            )
        return record_id

    def decode(self, value: bytes | None) -> list[str]:
        if not value:
            return []
        return [part for part in value.decode("utf-8").split(self.separator) if part]

    def encode(self, ids: list[str]) -> bytes:
        """Join ids as-is. Callers validate the ids they add with ``validate_id``.

        Entries already stored in a bucket are written back untouched, even if
        they would not pass validation today.
        """
        return self.separator.join(ids).encode("utf-8")


class BucketLayout(ValueObject):
    """How bucket keys are named and bucket values are framed."""

    separator: str = DEFAULT_SEPARATOR
    status_prefix: str = ""
    department_prefix: str = ""

    def status(self, name: str) -> BucketKey:
        return self._key(BucketKind.STATUS, name, self.status_prefix)

    def department(self, name: str) -> BucketKey:
        return self._key(BucketKind.DEPARTMENT, name, self.department_prefix)

    def codec(self) -> BucketCodec:
        return BucketCodec(self.separator)

    @staticmethod
    def _key(kind: BucketKind, name: str, prefix: str) -> BucketKey:
        if not name:
            raise InvalidArgumentError(f"{kind.value.capitalize()} name must not be empty", field=kind.value)
        return BucketKey(kind=kind, name=name, prefix=prefix)
