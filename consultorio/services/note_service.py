"""Session notes: two-phase save, editing and evaluation trend."""

import structlog

from consultorio.core.clock import Clock
from consultorio.core.exceptions import NotFoundException, ValidationError
from consultorio.core.store import Collection, KeyValueStore
from consultorio.schemas.notes import Evaluation, EvolutionPoint, NoteDraft, SessionNote

logger = structlog.get_logger(__name__)

NOTES_KEY = "notes"


class NoteService:
    """Service for managing session notes."""

    def __init__(self, store: KeyValueStore, clock: Clock):
        """Initialize service with store and clock."""
        self.collection = Collection(store, NOTES_KEY, SessionNote)
        self.clock = clock

    def list_for_patient(self, patient_id: str) -> list[SessionNote]:
        """A patient's notes, newest first."""
        notes = [n for n in self.collection.get_all() if n.patient_id == patient_id]
        return sorted(notes, key=lambda n: n.date, reverse=True)

    def has_note_for_appointment(self, appointment_id: str) -> bool:
        return any(n.appointment_id == appointment_id for n in self.collection.get_all())

    def draft(self, patient_id: str, content: str, appointment_id: str | None = None) -> NoteDraft:
        """
        Capture note text; nothing is stored until the draft is confirmed.

        Raises:
            ValidationError: If the text is blank
        """
        if not content.strip():
            raise ValidationError("Note content cannot be empty")
        return NoteDraft(patient_id=patient_id, content=content, appointment_id=appointment_id)

    def confirm(self, draft: NoteDraft, evaluation: Evaluation | None) -> SessionNote:
        """
        Persist a draft together with its required evaluation.

        Raises:
            ValidationError: If no evaluation was chosen
        """
        if evaluation is None:
            raise ValidationError("Select an evaluation before saving the note")

        note = SessionNote(
            patient_id=draft.patient_id,
            date=self.clock.now(),
            content=draft.content,
            appointment_id=draft.appointment_id,
            evaluation=evaluation,
        )
        self.collection.replace_all([note, *self.collection.get_all()])
        logger.info(
            "session_note_saved",
            note_id=note.id,
            patient_id=note.patient_id,
            appointment_id=note.appointment_id,
            evaluation=evaluation.value,
        )
        return note

    def edit(self, note_id: str, content: str, evaluation: Evaluation | None) -> SessionNote:
        """
        Update a saved note's content and evaluation.

        Patient and appointment links never change. ``evaluation=None`` clears
        the rating.

        Raises:
            NotFoundException: If the note does not exist
            ValidationError: If the new content is blank
        """
        if not content.strip():
            raise ValidationError("Note content cannot be empty")

        notes = self.collection.get_all()
        note = next((n for n in notes if n.id == note_id), None)
        if note is None:
            raise NotFoundException("Note not found")

        updated = note.model_copy(update={"content": content, "evaluation": evaluation})
        self.collection.replace_all([updated if n.id == note_id else n for n in notes])
        logger.info("session_note_edited", note_id=note_id, patient_id=note.patient_id)
        return updated

    def evolution(self, patient_id: str) -> list[EvolutionPoint]:
        """Evaluated notes of a patient as trend points, oldest first."""
        notes = sorted(self.list_for_patient(patient_id), key=lambda n: n.date)
        return [
            EvolutionPoint(
                note_id=n.id,
                date=n.date,
                value=n.evaluation.rank,
                label=n.evaluation.label,
            )
            for n in notes
            if n.evaluation is not None
        ]
