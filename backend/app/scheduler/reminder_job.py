"""
Appointment reminders: every reminder_poll_minutes, text customers whose appointment starts
reminder_lead_minutes from now (one poll interval wide window). reminder_sent_at marks rows
already handled so a slot is reminded at most once.
"""
import logging
from datetime import date, datetime, timedelta

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.config import settings
from app.core.clock import Clock, get_clock, local_to_utc, utc_to_local
from app.core.constants import ACTIVE_STATUSES, REMINDER_BATCH_LIMIT
from app.core.errors import SmsDeliveryError
from app.db.session import SessionLocal
from app.models.appointment import Appointment
from app.models.tenant import Tenant
from app.services.scheduling import tenant_offset_minutes
from app.services.sms import SmsClient, default_client, send_sms

logger = logging.getLogger(__name__)

REMINDER_MESSAGE = (
    "{business}: reminder of your appointment on {date} at {time}"
    " ({service} with {staff}). See you soon!"
)


def reminder_text(apt: Appointment) -> str:
    return REMINDER_MESSAGE.format(
        business=apt.tenant.business_name if apt.tenant else "Your salon",
        date=apt.date,
        time=apt.time,
        service=apt.service.name if apt.service else "service",
        staff=apt.staff.full_name if apt.staff else "our team",
    )


def _local_window(window_start: datetime, window_end: datetime, offset_minutes: int):
    """
    SQL condition for appointments whose local (date, time) falls in the window at this offset.
    Bounds are whole minutes and the end is inclusive; the exact check happens per row.
    """
    start = utc_to_local(window_start, offset_minutes)
    end = utc_to_local(window_end, offset_minutes)
    start_day, start_time = start.date().isoformat(), start.strftime("%H:%M")
    end_day, end_time = end.date().isoformat(), end.strftime("%H:%M")
    return and_(
        or_(Appointment.date > start_day, and_(Appointment.date == start_day, Appointment.time >= start_time)),
        or_(Appointment.date < end_day, and_(Appointment.date == end_day, Appointment.time <= end_time)),
    )


def _window_condition(db: Session, window_start: datetime, window_end: datetime):
    """One local window per distinct tenant offset; stored dates and times are tenant-local."""
    conditions = []
    for (raw_offset,) in db.query(Tenant.utc_offset_minutes).distinct():
        if raw_offset is None:
            tenant_match = Tenant.utc_offset_minutes.is_(None)
            offset = settings.default_utc_offset_minutes
        else:
            tenant_match = Tenant.utc_offset_minutes == raw_offset
            offset = raw_offset
        conditions.append(and_(tenant_match, _local_window(window_start, window_end, offset)))
    return or_(*conditions) if conditions else None


def send_due_reminders(db: Session, clock: Clock, sms: SmsClient) -> int:
    """Send reminders for appointments starting in the current window; returns how many went out."""
    now = clock.now()
    window_start = now + timedelta(minutes=settings.reminder_lead_minutes)
    window_end = window_start + timedelta(minutes=settings.reminder_poll_minutes)
    in_window = _window_condition(db, window_start, window_end)
    if in_window is None:
        return 0
    candidates = (
        db.query(Appointment)
        .join(Tenant, Appointment.tenant_id == Tenant.id)
        .filter(
            Appointment.status.in_(ACTIVE_STATUSES),
            Appointment.reminder_sent_at.is_(None),
            in_window,
        )
        .order_by(Appointment.date.asc(), Appointment.time.asc())
        .limit(REMINDER_BATCH_LIMIT)
        .all()
    )
    sent = 0
    for apt in candidates:
        try:
            starts_at = local_to_utc(date.fromisoformat(apt.date), apt.time, tenant_offset_minutes(apt.tenant))
            if not (window_start <= starts_at < window_end):
                continue
            if apt.customer is None or not apt.customer.phone:
                logger.warning("Reminder skipped for appointment %s: customer has no phone", apt.id)
                continue
            send_sms(sms, apt.customer.phone, reminder_text(apt))
            apt.reminder_sent_at = now
            sent += 1
        except SmsDeliveryError as e:
            logger.warning("Reminder for appointment %s not delivered: %s", apt.id, e)
        except Exception as e:
            logger.exception("Reminder for appointment %s failed: %s", apt.id, e)
    db.commit()
    if sent:
        logger.info("Reminder job: sent %s of %s candidates", sent, len(candidates))
    return sent


def run_reminder_job() -> None:
    db = SessionLocal()
    try:
        send_due_reminders(db, get_clock(), default_client)
    except Exception as e:
        logger.exception("Reminder job failed: %s", e)
        db.rollback()
    finally:
        db.close()
