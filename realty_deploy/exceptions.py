class RealtyDeployError(Exception):
    """Base exception for deployment orchestration errors."""


class ConfigurationError(RealtyDeployError):
    """Raised when required configuration is missing or malformed."""


class InvalidAmountFormat(RealtyDeployError, ValueError):
    """Raised when a decimal amount cannot be scaled to an on-chain integer."""


class NoSignerConfigured(RealtyDeployError):
    """Raised when no signing credential is available."""


class DeploymentFailed(RealtyDeployError):
    """Raised when a single deployment unit could not be deployed."""

    def __init__(self, unit_name: str, cause):
        self.unit_name = unit_name
        self.cause = cause
        # units confirmed before this failure, attached by the batch runner
        self.results = list()
        super().__init__(f"{unit_name}: {cause}")


class DeploymentTimeout(DeploymentFailed):
    """Raised when the confirmation of a deployment was not observed in time."""
