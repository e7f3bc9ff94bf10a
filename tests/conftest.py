from collections.abc import AsyncGenerator
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from consultorio.config import Settings
from consultorio.core.clock import FixedClock
from consultorio.core.store import InMemoryStore
from consultorio.dependencies import ServiceContainer, build_container, get_container
from consultorio.main import app
from consultorio.schemas.appointments import Appointment, AppointmentStatus, ConsultationType
from consultorio.schemas.patients import Anamnesis, Patient

# Monday, 09:00 local time
NOW = datetime(2024, 6, 10, 9, 0)
TODAY = "2024-06-10"
TOMORROW = "2024-06-11"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with the in-memory backend and default scheduling rules."""
    return Settings(STORE_BACKEND="memory", EXTRA_HOLIDAYS="", LOG_FORMAT="console")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def container(test_settings: Settings, clock: FixedClock, store: InMemoryStore) -> ServiceContainer:
    """Fully wired services sharing the fixed clock and a fresh store."""
    return build_container(test_settings, clock=clock, store=store)


@pytest.fixture
def patient(container: ServiceContainer) -> Patient:
    """Patient without anamnesis."""
    return container.patients.add(
        Patient(
            name="Ana Souza",
            email="ana@example.com",
            phone="+5511999990000",
            date_of_birth="1990-03-15",
        )
    )


@pytest.fixture
def other_patient(container: ServiceContainer) -> Patient:
    return container.patients.add(Patient(name="Bruno Lima", date_of_birth="1985-11-02"))


@pytest.fixture
def consultation_type(container: ServiceContainer) -> ConsultationType:
    return container.consultation_types.add(
        ConsultationType(name="Sessão individual", price=Decimal("150.00"))
    )


@pytest.fixture
def filled_anamnesis() -> Anamnesis:
    return Anamnesis(main_reason="Ansiedade no trabalho", occupation="Professora")


@pytest.fixture
def today_appointment(
    container: ServiceContainer,
    patient: Patient,
    consultation_type: ConsultationType,
) -> Appointment:
    """Scheduled appointment for the patient later today."""
    return container.appointments.create_appointment(
        patient.id, TODAY, "10:00", consultation_type.id
    )


@pytest.fixture
def make_appointment():
    """Factory building appointments without going through booking rules."""

    def factory(
        day: str,
        time: str,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED,
        **overrides,
    ) -> Appointment:
        data = {
            "patient_id": "p-1",
            "patient_name": "Paciente",
            "date": day,
            "time": time,
            "status": status,
            "consultation_type_id": "ct-1",
            "price": Decimal("100.00"),
        }
        data.update(overrides)
        return Appointment(**data)

    return factory


@pytest_asyncio.fixture
async def client(container: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client bound to the test container."""
    app.dependency_overrides[get_container] = lambda: container

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
