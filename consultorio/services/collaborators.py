"""Store-backed collaborators the scheduling core talks to.

Patient records, consultation types, the financial ledger, the notification
log and the account profile are owned elsewhere; these classes expose only the
narrow contract the core needs.
"""

from decimal import Decimal

import structlog

from consultorio.core.exceptions import NotFoundException
from consultorio.core.store import Collection, KeyValueStore
from consultorio.schemas.appointments import ConsultationType
from consultorio.schemas.notifications import AccountProfile, NotificationLogEntry
from consultorio.schemas.patients import Anamnesis, Patient
from consultorio.schemas.transactions import Transaction

logger = structlog.get_logger(__name__)

PATIENTS_KEY = "patients"
CONSULTATION_TYPES_KEY = "consultationTypes"
TRANSACTIONS_KEY = "transactions"
NOTIFICATION_LOGS_KEY = "notificationLogs"
ACCOUNT_KEY = "account"


class PatientRepository:
    """Read access to patients plus anamnesis updates."""

    def __init__(self, store: KeyValueStore):
        self.collection = Collection(store, PATIENTS_KEY, Patient)

    def find_by_id(self, patient_id: str) -> Patient | None:
        return next((p for p in self.collection.get_all() if p.id == patient_id), None)

    def list_active(self) -> list[Patient]:
        return [p for p in self.collection.get_all() if p.is_active]

    def add(self, patient: Patient) -> Patient:
        self.collection.replace_all([*self.collection.get_all(), patient])
        return patient

    def update_anamnesis(self, patient_id: str, anamnesis: Anamnesis) -> Patient:
        """Replace a patient's anamnesis record."""
        patients = self.collection.get_all()
        if not any(p.id == patient_id for p in patients):
            raise NotFoundException("Patient not found")

        updated = [
            p.model_copy(update={"anamnesis": anamnesis}) if p.id == patient_id else p
            for p in patients
        ]
        self.collection.replace_all(updated)
        return next(p for p in updated if p.id == patient_id)


class ConsultationTypeRepository:
    """Billable service definitions."""

    def __init__(self, store: KeyValueStore):
        self.collection = Collection(store, CONSULTATION_TYPES_KEY, ConsultationType)

    def find_by_id(self, type_id: str) -> ConsultationType | None:
        return next((ct for ct in self.collection.get_all() if ct.id == type_id), None)

    def list_all(self) -> list[ConsultationType]:
        return self.collection.get_all()

    def add(self, consultation_type: ConsultationType) -> ConsultationType:
        self.collection.replace_all([*self.collection.get_all(), consultation_type])
        return consultation_type

    def update_price(self, type_id: str, price: Decimal) -> ConsultationType:
        """Change a type's price. Already booked appointments keep their snapshot."""
        types = self.collection.get_all()
        if not any(ct.id == type_id for ct in types):
            raise NotFoundException("Consultation type not found")

        updated = [ct.model_copy(update={"price": price}) if ct.id == type_id else ct for ct in types]
        self.collection.replace_all(updated)
        return next(ct for ct in updated if ct.id == type_id)


class Ledger:
    """Write-only sink for financial transactions."""

    def __init__(self, store: KeyValueStore):
        self.collection = Collection(store, TRANSACTIONS_KEY, Transaction)

    def append(self, transaction: Transaction) -> Transaction:
        self.collection.replace_all([*self.collection.get_all(), transaction])
        logger.info(
            "transaction_recorded",
            transaction_id=transaction.id,
            amount=str(transaction.amount),
            type=transaction.type.value,
        )
        return transaction

    def list_all(self) -> list[Transaction]:
        return self.collection.get_all()


class NotificationLog:
    """History of notifications sent to patients, newest first."""

    def __init__(self, store: KeyValueStore):
        self.collection = Collection(store, NOTIFICATION_LOGS_KEY, NotificationLogEntry)

    def append(self, entry: NotificationLogEntry) -> NotificationLogEntry:
        self.collection.replace_all([entry, *self.collection.get_all()])
        return entry

    def list_all(self) -> list[NotificationLogEntry]:
        return self.collection.get_all()


class AccountRepository:
    """Single practitioner account profile."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> AccountProfile:
        raw = self.store.get(ACCOUNT_KEY)
        if raw is None:
            return AccountProfile()
        return AccountProfile.model_validate(raw)

    def save(self, profile: AccountProfile) -> AccountProfile:
        self.store.set(ACCOUNT_KEY, profile.model_dump(mode="json"))
        return profile
