"""Custom error classes for flowrun."""

from typing import Any, List, Optional


class FlowRunError(Exception):
    """Base exception for all flowrun errors."""

    pass


class ConfigurationError(FlowRunError):
    """Raised when environment configuration is invalid."""

    pass


class WorkflowValidationError(FlowRunError):
    """Raised when a workflow definition cannot be run (e.g. no trigger node)."""

    pass


class CredentialError(FlowRunError):
    """Base class for credential resolution failures."""

    def __init__(self, message: str, credential_id: Optional[str] = None):
        self.credential_id = credential_id
        super().__init__(message)


class CredentialNotFoundError(CredentialError):
    """Raised when a referenced credential does not exist."""

    def __init__(self, credential_id: Optional[str] = None):
        super().__init__("Credential not found", credential_id)


class CredentialForbiddenError(CredentialError):
    """Raised when a credential belongs to a different user."""

    def __init__(self, credential_id: Optional[str] = None):
        super().__init__("Forbidden", credential_id)


class CredentialInvalidError(CredentialError):
    """Raised when a credential is not marked valid."""

    def __init__(self, credential_id: Optional[str] = None):
        super().__init__("Credential is not verified", credential_id)


class MissingCredentialError(CredentialError):
    """Raised by a provider that requires a credential but received none."""

    def __init__(self, app_name: str):
        self.app_name = app_name
        super().__init__(f"Missing {app_name} credential data")


class CredentialDecryptionError(CredentialError):
    """Raised when encrypted credential data is malformed or tampered with."""

    pass


class ProviderError(FlowRunError):
    """Raised when an action provider call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NodeExecutionError(FlowRunError):
    """Raised when a node fails and the run is aborted.

    Carries the trace recorded up to and including the failing node, since
    that is the only evidence of partial progress once the run aborts.
    """

    def __init__(
        self,
        node_id: str,
        message: str,
        original_error: Exception = None,
        node_executions: Optional[List[Any]] = None,
    ):
        self.node_id = node_id
        self.message = message
        self.original_error = original_error
        self.node_executions = list(node_executions or [])
        super().__init__(f"Node '{node_id}' execution failed: {message}")
