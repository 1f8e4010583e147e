"""shipcheck exceptions.

All exceptions inherit from ShipcheckError.
"""


class ShipcheckError(Exception):
    """Base exception for all shipcheck errors."""

    pass


class RegistryError(ShipcheckError):
    """Raised on an invalid rule registration or a write to a frozen registry."""

    pass


class AgentExecutionError(ShipcheckError):
    """Raised when a category agent faults and failures are not isolated."""

    def __init__(self, agent: str, cause: BaseException):
        self.agent = agent
        self.cause = cause
        super().__init__(f"{agent} failed: {cause}")


class ManifestError(ShipcheckError):
    """Raised when a dependency manifest cannot be parsed."""

    def __init__(self, message: str, line: int = 1):
        self.line = line
        super().__init__(message)


class DiscoveryError(ShipcheckError):
    """Raised when a workspace root cannot be enumerated."""

    pass
