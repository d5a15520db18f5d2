from .base_service import BaseService
from .city_service import CityService
from .class_service import ClassService
from .user_service import UserService
from .registration_service import RegistrationService
from .attendance_service import AttendanceService

__all__ = [
    "BaseService",
    "CityService",
    "ClassService",
    "UserService",
    "RegistrationService",
    "AttendanceService"
]
