import enum


class UserRole(str, enum.Enum):
    STUDENT = "student"
    ADMIN = "admin"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non-binary"
    PREFER_NOT_TO_SAY = "prefer not to say"


class ClassType(str, enum.Enum):
    ONE_TIME = "one-time"
    ONGOING = "ongoing"


class TargetGender(str, enum.Enum):
    ANY = "any"
    MALE = "male"
    FEMALE = "female"


class RegistrationType(str, enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"


class RegistrationStatus(str, enum.Enum):
    ENROLLED = "enrolled"
    WAITLISTED = "waitlisted"
    CANCELLED_BY_USER = "cancelled_by_user"
    CANCELLED_BY_ADMIN = "cancelled_by_admin"


# Statuses that hold a seat in a class
ACTIVE_REGISTRATION_STATUSES = (RegistrationStatus.ENROLLED, RegistrationStatus.WAITLISTED)


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


# Statuses counted as attending a session
ATTENDED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class TimeOfDay(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


def enum_column_values(enum_cls):
    """Persist enum values rather than member names"""
    return [member.value for member in enum_cls]
