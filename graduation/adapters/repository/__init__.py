"""Repository adapters - Database implementations."""

from .postgres import (
    PostgresAdministratorRepository,
    PostgresAttendeeRepository,
    PostgresGraduateRepository,
    run_migrations,
)

__all__ = [
    "PostgresAdministratorRepository",
    "PostgresAttendeeRepository",
    "PostgresGraduateRepository",
    "run_migrations",
]
