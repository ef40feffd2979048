"""Error types raised by the deployment orchestrator."""


class AcornError(Exception):
    """Base class for orchestrator errors."""
    pass


class SubscriptionError(AcornError):
    """Raised when a subscription label is not in the session's subscription list."""
    pass


class AuthorizationError(AcornError):
    """Raised when the user could not be logged in."""
    pass


class ValidationError(AcornError):
    """Raised when a name or input is rejected by provider rules."""
    pass


class DeploymentError(AcornError):
    """Raised when a provider returned no usable result for a create call."""
    pass


class UnknownCommandError(AcornError, KeyError):
    """Raised when no handler is registered for a command."""
    pass


class ConfigError(AcornError):
    """Raised when the configuration file is invalid."""
    pass
