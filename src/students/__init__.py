"""Student directory module."""

from .models import STUDENTS_TABLES_CQL, Student


__all__ = ["STUDENTS_TABLES_CQL", "Student"]
