"""Custom Dishka scopes for the referral ledger."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> INVOCATION

    - APP: Process lifetime (config, engine, ledger adapter)
    - INVOCATION: One dispatched operation (services and handlers)
    """

    APP = new_scope("APP")
    INVOCATION = new_scope("INVOCATION")
