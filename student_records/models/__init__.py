from .mark import Mark
from .student import Student

__all__ = [
    "Mark",
    "Student",
]
