"""
Tests for the custom exception hierarchy.

This test suite covers:
- Which base class each exception belongs to
- Attributes kept on the exception instances
- Human-readable messages
"""

import pytest

from cellwidgets.exceptions import (
    BackendClosedError,
    BackendError,
    ContractViolation,
    DisabledDispatchError,
    NotCheckableError,
    ToolkitError,
    TransportError,
)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    @pytest.mark.parametrize(
        "exc_class,base",
        [
            (BackendError, ToolkitError),
            (TransportError, BackendError),
            (BackendClosedError, BackendError),
            (ContractViolation, ToolkitError),
            (DisabledDispatchError, ContractViolation),
            (NotCheckableError, ContractViolation),
        ],
    )
    def test_subclass(self, exc_class, base):
        assert issubclass(exc_class, base)

    def test_contract_violations_are_not_backend_errors(self):
        assert not issubclass(DisabledDispatchError, BackendError)
        assert not issubclass(TransportError, ContractViolation)


class TestBackendErrors:
    """Tests for backend error attributes and messages."""

    def test_transport_error(self):
        error = TransportError("TerminalBackend", "write failed")

        assert error.backend_name == "TerminalBackend"
        assert error.reason == "write failed"
        assert str(error) == "TerminalBackend transport failed: write failed"

    def test_backend_closed_error(self):
        error = BackendClosedError("ImageBackend", "flush_screen")

        assert error.operation == "flush_screen"
        assert "flush_screen() called on ImageBackend after shutdown" in str(error)

    def test_catch_as_toolkit_error(self):
        with pytest.raises(ToolkitError):
            raise TransportError("WebSocketBackend", "client disconnected")


class TestContractViolations:
    """Tests for menu item precondition errors."""

    def test_disabled_dispatch_error(self):
        error = DisabledDispatchError(10)

        assert error.item_id == 10
        assert "disabled" in str(error)

    def test_not_checkable_error(self):
        error = NotCheckableError(1025)

        assert error.item_id == 1025
        assert str(error) == "Menu item 1025 is not checkable"
