"""Anamnesis form state and completeness."""

from typing import Any, get_args

import structlog

from consultorio.core.exceptions import NotFoundException, ValidationError
from consultorio.schemas.patients import (
    SUBSTANCE_USE_FIELDS,
    SUBSTANCE_USE_NONE,
    Anamnesis,
    AnamnesisChange,
    Patient,
)
from consultorio.services.collaborators import PatientRepository

logger = structlog.get_logger(__name__)


def is_anamnesis_complete(anamnesis: Anamnesis | None) -> bool:
    """Present and at least one field filled in (non-empty, non-false, non-zero)."""
    if anamnesis is None:
        return False
    return any(
        not (value is None or value is False or value == "" or value == 0)
        for value in anamnesis.model_dump().values()
    )


def resolve_substance_exclusivity(form: dict[str, Any], field: str, checked: bool) -> dict[str, Any]:
    """
    Apply the substance-use checkbox rule.

    Checking "none" clears every substance; checking any substance clears
    "none". Unchecking only affects the field itself.
    """
    if field == SUBSTANCE_USE_NONE:
        if checked:
            return {**form, **{name: False for name in SUBSTANCE_USE_FIELDS}, SUBSTANCE_USE_NONE: True}
        return {**form, SUBSTANCE_USE_NONE: False}
    return {**form, field: checked, SUBSTANCE_USE_NONE: False}


def apply_anamnesis_change(anamnesis: Anamnesis, change: AnamnesisChange) -> Anamnesis:
    """
    Return the form after one field edit.

    Args:
        anamnesis: Current form state
        change: Field name and new value

    Returns:
        New form state; the input is not modified

    Raises:
        ValidationError: If the field is unknown or the value has the wrong kind
    """
    fields = Anamnesis.model_fields
    if change.field not in fields:
        raise ValidationError(f"Unknown anamnesis field: {change.field}")

    form = anamnesis.model_dump()
    annotation = fields[change.field].annotation
    value = change.value

    if annotation is bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{change.field} expects true or false")
        if change.field == SUBSTANCE_USE_NONE or change.field in SUBSTANCE_USE_FIELDS:
            form = resolve_substance_exclusivity(form, change.field, value)
        else:
            form[change.field] = value
    elif int in get_args(annotation):
        if value == "" or value is None:
            form[change.field] = None
        else:
            try:
                form[change.field] = int(value)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"{change.field} expects a number") from e
    else:
        form[change.field] = "" if value is None else str(value)

    return Anamnesis.model_validate(form)


class AnamnesisService:
    """Reads and writes the anamnesis blob of a patient."""

    def __init__(self, patients: PatientRepository):
        self.patients = patients

    def get(self, patient_id: str) -> Anamnesis | None:
        patient = self.patients.find_by_id(patient_id)
        if patient is None:
            raise NotFoundException("Patient not found")
        return patient.anamnesis

    def is_complete(self, patient_id: str) -> bool:
        return is_anamnesis_complete(self.get(patient_id))

    def save(self, patient_id: str, anamnesis: Anamnesis) -> Patient:
        patient = self.patients.update_anamnesis(patient_id, anamnesis)
        logger.info(
            "anamnesis_saved",
            patient_id=patient_id,
            complete=is_anamnesis_complete(anamnesis),
        )
        return patient
