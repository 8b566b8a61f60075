# app/models/__init__.py

from .profile import Profile
from .scholarship import Scholarship
from .application import Application, APPLICATION_STATUSES
from .document import ApplicationDocument
from .event import Event, EventRegistration

__all__ = [
    "Profile",
    "Scholarship",
    "Application",
    "APPLICATION_STATUSES",
    "ApplicationDocument",
    "Event",
    "EventRegistration",
]
