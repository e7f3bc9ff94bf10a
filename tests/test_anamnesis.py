"""Tests for anamnesis form rules."""

import pytest

from consultorio.core.exceptions import NotFoundException, ValidationError
from consultorio.schemas.patients import Anamnesis, AnamnesisChange
from consultorio.services.anamnesis_service import (
    apply_anamnesis_change,
    is_anamnesis_complete,
    resolve_substance_exclusivity,
)


@pytest.mark.parametrize(
    ("anamnesis", "expected"),
    [
        (None, False),
        (Anamnesis(), False),
        (Anamnesis(number_of_children=0), False),
        (Anamnesis(occupation="Engenheira"), True),
        (Anamnesis(number_of_siblings=2), True),
        (Anamnesis(substance_use_none=True), True),
    ],
)
def test_is_anamnesis_complete(anamnesis, expected):
    assert is_anamnesis_complete(anamnesis) is expected


def test_checking_none_clears_substances():
    form = {"substance_use_alcohol": True, "substance_use_cigarette": True, "substance_use_none": False}

    result = resolve_substance_exclusivity(form, "substance_use_none", True)

    assert result["substance_use_none"] is True
    assert result["substance_use_alcohol"] is False
    assert result["substance_use_cigarette"] is False
    assert result["substance_use_marijuana"] is False
    assert form["substance_use_alcohol"] is True


def test_checking_substance_clears_none():
    form = {"substance_use_none": True}

    result = resolve_substance_exclusivity(form, "substance_use_alcohol", True)

    assert result == {"substance_use_none": False, "substance_use_alcohol": True}


def test_unchecking_substance():
    form = {"substance_use_alcohol": True, "substance_use_cocaine": True, "substance_use_none": False}

    result = resolve_substance_exclusivity(form, "substance_use_alcohol", False)

    assert result["substance_use_alcohol"] is False
    assert result["substance_use_cocaine"] is True


def test_apply_change_text_field():
    original = Anamnesis()

    updated = apply_anamnesis_change(original, AnamnesisChange(field="main_reason", value="Luto"))

    assert updated.main_reason == "Luto"
    assert original.main_reason == ""


def test_apply_change_number_fields():
    form = apply_anamnesis_change(Anamnesis(), AnamnesisChange(field="number_of_children", value="2"))
    assert form.number_of_children == 2

    form = apply_anamnesis_change(form, AnamnesisChange(field="number_of_children", value=""))
    assert form.number_of_children is None

    with pytest.raises(ValidationError):
        apply_anamnesis_change(form, AnamnesisChange(field="number_of_children", value="dois"))


def test_apply_change_substance_rule():
    form = Anamnesis(substance_use_alcohol=True)

    form = apply_anamnesis_change(form, AnamnesisChange(field="substance_use_none", value=True))

    assert form.substance_use_none is True
    assert form.substance_use_alcohol is False


def test_apply_change_plain_checkbox():
    form = apply_anamnesis_change(
        Anamnesis(), AnamnesisChange(field="main_symptoms_anxiety", value=True)
    )
    assert form.main_symptoms_anxiety is True
    assert form.substance_use_none is False


def test_apply_change_errors():
    with pytest.raises(ValidationError):
        apply_anamnesis_change(Anamnesis(), AnamnesisChange(field="shoe_size", value="42"))
    with pytest.raises(ValidationError):
        apply_anamnesis_change(
            Anamnesis(), AnamnesisChange(field="substance_use_alcohol", value="yes")
        )


def test_service_save_and_get(container, patient, filled_anamnesis):
    assert container.anamnesis.get(patient.id) is None
    assert container.anamnesis.is_complete(patient.id) is False

    container.anamnesis.save(patient.id, filled_anamnesis)

    assert container.anamnesis.get(patient.id) == filled_anamnesis
    assert container.anamnesis.is_complete(patient.id) is True
    assert container.patients.find_by_id(patient.id).name == "Ana Souza"


def test_service_unknown_patient(container, filled_anamnesis):
    with pytest.raises(NotFoundException):
        container.anamnesis.get("missing")
    with pytest.raises(NotFoundException):
        container.anamnesis.save("missing", filled_anamnesis)
