class DerivationError(ValueError):
    """Base class for errors that abort a derivation run."""

class MissingFieldError(DerivationError):
    """An attach/detach event lacks its pool name or server uuid."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Attach/detach event is missing required field '{field}'")

class EmptyPoolListError(DerivationError):
    """No pools are configured, so there is no default backend."""

    def __init__(self):
        super().__init__("No load balancer pools configured")
