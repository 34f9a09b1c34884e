from proxy_config import TransportStrategy


class DispatcherError(Exception):
    """Base exception for dispatcher errors."""
    pass


class DispatcherConstructionError(DispatcherError):
    def __init__(self, strategy: TransportStrategy, cause: Exception):
        msg = f"Failed to build '{strategy.value}' dispatcher: {type(cause).__name__}: {cause}"
        super().__init__(msg)
        self.strategy = strategy
        self.cause = cause
