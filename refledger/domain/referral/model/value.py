"""Referral domain value objects."""

from refledger.domain.shared.model.value import ValueObject


class RepairReport(ValueObject):
    """Outcome of re-synchronizing one referral with its index buckets.

    ``added`` and ``removed`` list the bucket keys that were actually written;
    an empty report means the indexes were already consistent.
    """

    record_id: str
    status: str
    added: list[str] = []
    removed: list[str] = []
