from app.models.appointment import Appointment
from app.models.customer import Customer
from app.models.otp_verification import OtpVerification
from app.models.service import Service
from app.models.staff import Staff
from app.models.tenant import Tenant

__all__ = [
    "Appointment",
    "Customer",
    "OtpVerification",
    "Service",
    "Staff",
    "Tenant",
]
