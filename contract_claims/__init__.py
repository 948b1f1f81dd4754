"""Contract Monthly Claims core.

In-memory claim store, lifecycle rules, submission notifications and the
role desks (lecturer, coordinator, manager, HR) built on top of them.
Wire everything through ``contract_claims.services.create_services``.
"""

__version__ = "1.0.0"
