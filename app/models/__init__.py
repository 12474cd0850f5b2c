from app.models.admin_session import AdminSession
from app.models.admin_user import AdminPublic, AdminUser
from app.models.appointment import Appointment

__all__ = [
    "AdminSession",
    "AdminPublic",
    "AdminUser",
    "Appointment",
]
