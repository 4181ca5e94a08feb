"""
Centralized constants for scheduling, appointments and background jobs.

Change job IDs, status names or the default week here instead of scattering literals
across services and routes. Tunables that differ per deployment live in app.config.
"""

# Scheduler job IDs (must match ids used in main.py add_job)
REMINDER_JOB_ID = "appointment_reminders"

# Appointment status values. Any transition is allowed; routes only restrict who may set what.
STATUS_PENDING = "pending"
STATUS_SCHEDULED = "scheduled"
STATUS_CONFIRMED = "confirmed"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"
STATUS_NO_SHOW = "no_show"

APPOINTMENT_STATUSES = (
    STATUS_PENDING,
    STATUS_SCHEDULED,
    STATUS_CONFIRMED,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
    STATUS_NO_SHOW,
)

# Statuses that still occupy a slot / get reminders
ACTIVE_STATUSES = (STATUS_PENDING, STATUS_SCHEDULED, STATUS_CONFIRMED)

# Session user types carried in the JWT
USER_OWNER = "owner"
USER_STAFF = "staff"
USER_CUSTOMER = "customer"
USER_TYPES = (USER_OWNER, USER_STAFF, USER_CUSTOMER)

# Index 0 = Sunday, matching the mobile clients' Date.getDay()
DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

# Used when a tenant has never saved working hours
DEFAULT_WORKING_HOURS: dict[str, dict] = {
    "monday": {"start": "09:00", "end": "18:00", "closed": False},
    "tuesday": {"start": "09:00", "end": "18:00", "closed": False},
    "wednesday": {"start": "09:00", "end": "18:00", "closed": False},
    "thursday": {"start": "09:00", "end": "18:00", "closed": False},
    "friday": {"start": "09:00", "end": "18:00", "closed": False},
    "saturday": {"start": "09:00", "end": "17:00", "closed": False},
    "sunday": {"start": "10:00", "end": "16:00", "closed": True},
}

# Bounds for tenant settings
MIN_SLOT_INTERVAL_MINUTES = 1
MAX_SLOT_INTERVAL_MINUTES = 240
MIN_UTC_OFFSET_MINUTES = -12 * 60
MAX_UTC_OFFSET_MINUTES = 14 * 60

# OTP
OTP_PURPOSE_MOBILE_LOGIN = "mobile_login"
OTP_LENGTH = 6

# Listing caps so responses stay bounded
CUSTOMERS_LIST_LIMIT = 500
APPOINTMENTS_LIST_LIMIT = 1000
REMINDER_BATCH_LIMIT = 200
