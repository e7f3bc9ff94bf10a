"""Service wiring and FastAPI dependencies."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from consultorio.config import Settings, settings
from consultorio.core.clock import Clock, SystemClock
from consultorio.core.holidays import HolidayCalendar
from consultorio.core.store import KeyValueStore, create_store
from consultorio.services.anamnesis_service import AnamnesisService
from consultorio.services.appointment_service import AppointmentService
from consultorio.services.availability_service import AvailabilityEngine
from consultorio.services.collaborators import (
    AccountRepository,
    ConsultationTypeRepository,
    Ledger,
    NotificationLog,
    PatientRepository,
)
from consultorio.services.note_service import NoteService
from consultorio.services.notification_service import NotificationService
from consultorio.services.session_service import ConsultationSessionController


@dataclass
class ServiceContainer:
    """Every service of the practice, sharing one store and one clock."""

    settings: Settings
    clock: Clock
    store: KeyValueStore
    patients: PatientRepository
    consultation_types: ConsultationTypeRepository
    ledger: Ledger
    notification_log: NotificationLog
    accounts: AccountRepository
    availability: AvailabilityEngine
    appointments: AppointmentService
    anamnesis: AnamnesisService
    notes: NoteService
    sessions: ConsultationSessionController
    notifications: NotificationService


def build_container(
    app_settings: Settings,
    clock: Clock | None = None,
    store: KeyValueStore | None = None,
) -> ServiceContainer:
    """
    Wire services together.

    Args:
        app_settings: Settings to use
        clock: Clock override, system clock by default
        store: Store override, configured backend by default

    Returns:
        Ready-to-use container
    """
    clock = clock or SystemClock()
    store = store if store is not None else create_store(app_settings)

    patients = PatientRepository(store)
    consultation_types = ConsultationTypeRepository(store)
    ledger = Ledger(store)
    notification_log = NotificationLog(store)
    accounts = AccountRepository(store)
    appointments = AppointmentService(store, clock, patients, consultation_types)
    anamnesis = AnamnesisService(patients)
    notes = NoteService(store, clock)

    return ServiceContainer(
        settings=app_settings,
        clock=clock,
        store=store,
        patients=patients,
        consultation_types=consultation_types,
        ledger=ledger,
        notification_log=notification_log,
        accounts=accounts,
        availability=AvailabilityEngine(
            app_settings, clock, HolidayCalendar(app_settings.extra_holidays)
        ),
        appointments=appointments,
        anamnesis=anamnesis,
        notes=notes,
        sessions=ConsultationSessionController(
            app_settings, clock, appointments, anamnesis, notes, ledger
        ),
        notifications=NotificationService(
            clock, appointments, patients, accounts, notification_log
        ),
    )


@lru_cache
def get_container() -> ServiceContainer:
    """Get the process-wide container."""
    return build_container(settings)


# Type aliases for dependency injection
Services = Annotated[ServiceContainer, Depends(get_container)]
