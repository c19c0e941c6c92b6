from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from salon_scheduler.core.config import settings
from salon_scheduler.application.ports.account_repository import AccountRepositoryPort
from salon_scheduler.application.ports.agreement_repository import AgreementRepositoryPort
from salon_scheduler.application.ports.catalog import CatalogPort
from salon_scheduler.application.ports.email_sender import EmailSenderPort
from salon_scheduler.application.ports.schedule_repository import ScheduleRepositoryPort
from salon_scheduler.application.use_cases.booking import BookingUseCase
from salon_scheduler.application.use_cases.expiration_sweeper import ExpirationSweeper
from salon_scheduler.application.use_cases.manage_appointments import ManageAppointmentsUseCase
from salon_scheduler.application.use_cases.manage_schedules import ManageSchedulesUseCase
from salon_scheduler.application.use_cases.pull_availability import PullAvailabilityUseCase
from salon_scheduler.application.use_cases.resolve_confirmation import ResolveConfirmationUseCase
from salon_scheduler.application.use_cases.salon_technicians import SalonTechniciansUseCase
from salon_scheduler.application.use_cases.technician_calendar import TechnicianCalendarUseCase
from salon_scheduler.infrastructure.email.http_email import HttpEmailSender
from salon_scheduler.infrastructure.email.mock_email import MockEmailSender
from salon_scheduler.infrastructure.store import seed_data
from salon_scheduler.infrastructure.store.memory_store import (
    MemoryAccountRepository,
    MemoryAgreementRepository,
    MemoryCatalog,
    MemoryScheduleRepository,
)


_agreement_repository: MemoryAgreementRepository | None = None
_schedule_repository: MemoryScheduleRepository | None = None
_account_repository: MemoryAccountRepository | None = None


def get_agreement_repository() -> AgreementRepositoryPort:
    global _agreement_repository
    if _agreement_repository is None:
        _agreement_repository = MemoryAgreementRepository()
    return _agreement_repository


def get_schedule_repository() -> ScheduleRepositoryPort:
    global _schedule_repository
    if _schedule_repository is None:
        _schedule_repository = MemoryScheduleRepository(seed_data.WEEKLY_RULES)
    return _schedule_repository


def get_account_repository() -> AccountRepositoryPort:
    global _account_repository
    if _account_repository is None:
        _account_repository = MemoryAccountRepository(technicians=seed_data.TECHNICIANS)
    return _account_repository


@lru_cache
def get_catalog() -> CatalogPort:
    return MemoryCatalog(services=seed_data.SERVICES, salons=seed_data.SALONS)


@lru_cache
def get_email_sender() -> EmailSenderPort:
    logger = logging.getLogger(__name__)
    if not settings.EMAIL_API_KEY or settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using MockEmailSender (no API key or ENV=dev/local)")
        return MockEmailSender()
    logger.info("Using HttpEmailSender")
    return HttpEmailSender()


async def close_email_sender() -> None:
    """Release the HTTP client held by the cached sender, if one was created."""
    if get_email_sender.cache_info().currsize == 0:
        return
    sender = get_email_sender()
    if isinstance(sender, HttpEmailSender):
        await sender.aclose()
        logging.getLogger(__name__).info("Email sender closed")


def get_salon_timezone() -> ZoneInfo:
    return ZoneInfo(settings.SALON_TIMEZONE)


def get_pull_availability_use_case() -> PullAvailabilityUseCase:
    return PullAvailabilityUseCase(
        schedules=get_schedule_repository(),
        agreements=get_agreement_repository(),
        catalog=get_catalog(),
        timezone=get_salon_timezone(),
        granularity_minutes=settings.SLOT_GRANULARITY_MINUTES,
        max_days=settings.AVAILABILITY_MAX_DAYS,
    )


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        agreements=get_agreement_repository(),
        catalog=get_catalog(),
        accounts=get_account_repository(),
        email_sender=get_email_sender(),
        hold_minutes=settings.CONFIRMATION_HOLD_MINUTES,
    )


def get_resolve_confirmation_use_case() -> ResolveConfirmationUseCase:
    return ResolveConfirmationUseCase(
        repository=get_agreement_repository(),
        email_sender=get_email_sender(),
        hold_minutes=settings.CONFIRMATION_HOLD_MINUTES,
    )


def get_manage_schedules_use_case() -> ManageSchedulesUseCase:
    return ManageSchedulesUseCase(
        schedules=get_schedule_repository(),
        salon_id=settings.SALON_ID,
        timezone=get_salon_timezone(),
    )


def get_manage_appointments_use_case() -> ManageAppointmentsUseCase:
    return ManageAppointmentsUseCase(
        agreements=get_agreement_repository(),
        catalog=get_catalog(),
        accounts=get_account_repository(),
        email_sender=get_email_sender(),
        salon_id=settings.SALON_ID,
    )


def get_expiration_sweeper() -> ExpirationSweeper:
    return ExpirationSweeper(
        repository=get_agreement_repository(),
        interval_seconds=settings.EXPIRATION_SWEEP_INTERVAL_SECONDS,
    )


def get_technician_calendar_use_case() -> TechnicianCalendarUseCase:
    return TechnicianCalendarUseCase(
        schedules=get_schedule_repository(),
        agreements=get_agreement_repository(),
        accounts=get_account_repository(),
    )


def get_salon_technicians_use_case() -> SalonTechniciansUseCase:
    return SalonTechniciansUseCase(
        schedules=get_schedule_repository(),
        accounts=get_account_repository(),
        catalog=get_catalog(),
    )
