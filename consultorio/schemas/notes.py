"""Session note schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from consultorio.schemas.appointments import new_id


class Evaluation(str, Enum):
    """Practitioner's ordinal rating of a session, worst to best."""

    PESSIMO = "pessimo"
    RUIM = "ruim"
    BOM = "bom"
    OTIMO = "otimo"

    @property
    def rank(self) -> int:
        return list(Evaluation).index(self) + 1

    @property
    def label(self) -> str:
        return EVALUATION_LABELS[self]


EVALUATION_LABELS = {
    Evaluation.PESSIMO: "Péssimo",
    Evaluation.RUIM: "Ruim",
    Evaluation.BOM: "Bom",
    Evaluation.OTIMO: "Ótimo",
}


class SessionNote(BaseModel):
    """Dated clinical note, optionally linked to the appointment it documents."""

    id: str = Field(default_factory=new_id)
    patient_id: str
    date: datetime
    content: str
    appointment_id: str | None = None
    evaluation: Evaluation | None = None


class NoteDraft(BaseModel):
    """First phase of a note save: text captured, evaluation still pending."""

    patient_id: str
    content: str = Field(..., min_length=1)
    appointment_id: str | None = None


class NoteDraftRequest(BaseModel):
    """Schema for capturing note text."""

    content: str


class NoteConfirmRequest(BaseModel):
    """Schema for the evaluation choice that completes a note save."""

    evaluation: Evaluation | None = None


class NoteUpdate(BaseModel):
    """Schema for editing a saved note.

    ``evaluation=None`` clears the rating.
    """

    content: str
    evaluation: Evaluation | None = None


class EvolutionPoint(BaseModel):
    """One evaluated session on a patient's trend line."""

    note_id: str
    date: datetime
    value: int
    label: str
