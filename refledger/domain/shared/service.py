"""Service base class.

A service is a bag of collaborators (ports, codecs, other services) declared as
annotated class attributes. The metaclass turns each subclass into a
keyword-only dataclass, so services are built as ``IndexService(ledger=...,
layout=...)`` and dishka can inject them by field name.
"""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(kw_only_default=True)
class _ServiceMeta(type):
    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls, kw_only=True, eq=False)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for ledger services. Subclasses are keyword-only dataclasses."""
