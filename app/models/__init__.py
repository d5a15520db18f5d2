# app/models/__init__.py
"""Import all models here, if needed for Alembic migration."""
from .base import Base

from .city import City
from .user import User
from .class_offering import ClassOffering
from .registration import Registration
from .attendance import AttendanceRecord, AttendanceEntry

# This ensures all models are loaded when importing models
