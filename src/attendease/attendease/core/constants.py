"""Constants and defaults.

Note: Keep constants here to avoid magic values spread across code.
"""

from .enums import Role

# Sunday = 0, same numbering the timetable uses when deriving a weekday from a date.
WEEKDAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

# Order used when showing a week to students.
DISPLAY_DAY_ORDER = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

OTHER_APPROVER = "other"
ADMIN_QUEUE_ID = "admin-queue"
ADMIN_QUEUE_NAME = "Administration"

DEFAULT_SIGNUP_ROLE = Role.STUDENT
MIN_PASSWORD_LENGTH = 6

DEFAULT_RECENT_REQUESTS = 3
DEFAULT_LIST_LIMIT = 500
DEFAULT_RESET_TOKEN_TTL_MINUTES = 60
DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024

# Column widths of the timetables table.
MAX_TIME_SLOT_LENGTH = 64
MAX_SUBJECT_LENGTH = 255
MAX_FACULTY_NAME_LENGTH = 255
MAX_COURSE_LENGTH = 128
MAX_SEMESTER = 2**31 - 1
