"""Custom exceptions for backends and widgets.

Exception Hierarchy:
    ToolkitError (base)
        ├── BackendError
        │   ├── TransportError
        │   └── BackendClosedError
        └── ContractViolation
            ├── DisabledDispatchError
            └── NotCheckableError

Transport errors are fatal to the backend instance that raised them. The
owning application decides whether to reconnect or end the session.

Contract violations are programming errors. They are raised immediately and
are not meant to be caught and recovered from at runtime.

Usage:
    from cellwidgets.exceptions import DisabledDispatchError

    if not item.enabled:
        raise DisabledDispatchError(item.id)
"""


class ToolkitError(Exception):
    """Base exception for all toolkit errors."""



class BackendError(ToolkitError):
    """Base exception for display/input backend errors."""



class TransportError(BackendError):
    """The device or connection behind a backend failed."""

    def __init__(self, backend_name: str, reason: str):
        self.backend_name = backend_name
        self.reason = reason
        super().__init__(f"{backend_name} transport failed: {reason}")


class BackendClosedError(BackendError):
    """A backend was used after shutdown()."""

    def __init__(self, backend_name: str, operation: str):
        self.backend_name = backend_name
        self.operation = operation
        super().__init__(f"{operation}() called on {backend_name} after shutdown")


class ContractViolation(ToolkitError):
    """Base exception for widget precondition violations."""



class DisabledDispatchError(ContractViolation):
    """dispatch() was invoked on a disabled menu item."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Menu item {item_id} is disabled and cannot dispatch")


class NotCheckableError(ContractViolation):
    """A non-checkable menu item was asked to become checked."""

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Menu item {item_id} is not checkable")
