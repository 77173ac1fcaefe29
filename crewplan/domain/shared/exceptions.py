"""
Domain Exceptions

Defines custom exceptions for domain-specific errors with type discrimination.
Scheduling conflicts are not exceptions: detection returns them as data and
callers decide whether their severity blocks an operation.
"""

from enum import Enum
from uuid import UUID


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DEPENDENCY = "dependency"
    RESOLUTION = "resolution"
    REPOSITORY = "repository"


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, str | int | float | bool | None] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, str | int | float | bool | None]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when input fails validation at the call boundary."""

    def __init__(
        self,
        field_name: str,
        value: str | int | float | bool | None,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            {
                "field": field_name,
                "value": str(value) if value is not None else None,
                "error_code": self.error_code,
            },
        )


# Lookup exceptions
class EntityNotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    entity_type = "Entity"

    def __init__(self, entity_id: UUID) -> None:
        super().__init__(
            f"{self.entity_type} not found: {entity_id}",
            ErrorType.NOT_FOUND,
            {"entity_type": self.entity_type, "entity_id": str(entity_id)},
        )
        self.entity_id = entity_id


class ProjectNotFoundError(EntityNotFoundError):
    entity_type = "Project"


class PhaseNotFoundError(EntityNotFoundError):
    entity_type = "Phase"


class EmployeeNotFoundError(EntityNotFoundError):
    entity_type = "Employee"


class AssignmentNotFoundError(EntityNotFoundError):
    entity_type = "Assignment"


# Dependency graph exceptions
class DependencyError(DomainError):
    """Base class for rejected phase dependency sets."""

    def __init__(
        self,
        message: str,
        details: dict[str, str | int | float | bool | None] | None = None,
    ) -> None:
        super().__init__(message, ErrorType.DEPENDENCY, details)


class DependencyNotFoundError(DependencyError):
    """Raised when a proposed dependency phase does not exist."""

    def __init__(self, missing_ids: list[UUID]) -> None:
        super().__init__(
            "One or more dependency phases not found",
            {"missing": ",".join(str(phase_id) for phase_id in missing_ids)},
        )
        self.missing_ids = missing_ids


class CrossProjectDependencyError(DependencyError):
    """Raised when a proposed dependency belongs to another project."""

    def __init__(self, project_id: UUID, foreign_ids: list[UUID]) -> None:
        super().__init__(
            "Dependencies must belong to the same project",
            {
                "project_id": str(project_id),
                "foreign": ",".join(str(phase_id) for phase_id in foreign_ids),
            },
        )
        self.project_id = project_id
        self.foreign_ids = foreign_ids


class CircularDependencyError(DependencyError):
    """Raised when a dependency set would introduce a cycle."""

    def __init__(self, phase_id: UUID | None = None) -> None:
        message = "Circular dependency detected"
        if phase_id is not None:
            message = f"{message} for phase {phase_id}"
        super().__init__(
            message, {"phase_id": str(phase_id) if phase_id else None}
        )
        self.phase_id = phase_id


# Resolution exceptions
class ResolutionError(DomainError):
    """Raised when a resolution cannot be carried out."""

    def __init__(
        self,
        message: str,
        details: dict[str, str | int | float | bool | None] | None = None,
    ) -> None:
        super().__init__(message, ErrorType.RESOLUTION, details)


class NoCandidateError(ResolutionError):
    """Raised when no employee satisfies a resolution's requirements."""

    def __init__(self, purpose: str, phase_id: UUID | None = None) -> None:
        super().__init__(
            f"No eligible employee found to {purpose}",
            {"phase_id": str(phase_id) if phase_id else None},
        )
        self.purpose = purpose
        self.phase_id = phase_id


class RepositoryError(DomainError):
    """Raised when the persistence collaborator fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorType.REPOSITORY)
