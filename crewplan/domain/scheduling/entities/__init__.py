"""Entities for the crew scheduling domain."""

from .assignment import Assignment
from .employee import Employee
from .phase import Phase
from .project import Project

__all__ = ["Assignment", "Employee", "Phase", "Project"]
