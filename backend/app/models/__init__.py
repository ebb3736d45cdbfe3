from app.models.course import Course  # noqa: F401
from app.models.personal_timetable import PersonalTimetable  # noqa: F401
