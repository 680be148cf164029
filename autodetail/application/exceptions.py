class DomainError(Exception):
    """Base class for errors surfaced to the caller."""


class Unauthorized(DomainError):
    """Raised when there is no identity or the identity lacks the required role."""


class Unauthenticated(Unauthorized):
    """Raised when the caller presented no identity."""


class InvariantViolation(Unauthorized):
    """Raised when acting on a resource owned by someone else."""


class NotFound(DomainError):
    """Raised when a referenced service, vehicle, booking, tenant or assessment is missing."""


class ValidationError(DomainError):
    """Raised for malformed input, before any state is mutated."""

    def __init__(self, errors: dict[str, str] | str) -> None:
        if isinstance(errors, str):
            errors = {"_": errors}
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" if k != "_" else v for k, v in self.errors.items()))


class WorkflowStepError(RuntimeError):
    """Raised when a lifecycle workflow step cannot complete."""


class EmbeddingUpstreamError(RuntimeError):
    """Raised when the embedding provider fails (timeouts, network errors, service unavailable)."""
    pass
