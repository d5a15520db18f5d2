from . import health, users, cities, classes, registrations, attendance

__all__ = [
    "health",
    "users",
    "cities",
    "classes",
    "registrations",
    "attendance"
]
