# Import all models so Alembic can discover them via Base.metadata
from .course import Course
from .enrollment import Enrollment
from .lesson import Lesson
from .lesson_completion import LessonCompletion
from .live_session import LiveSession
from .payment import Payment

__all__ = [
    "Course",
    "Enrollment",
    "Lesson",
    "LessonCompletion",
    "LiveSession",
    "Payment",
]
