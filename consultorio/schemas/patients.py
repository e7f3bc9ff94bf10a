"""Patient and anamnesis schemas."""

from pydantic import BaseModel, Field

from consultorio.schemas.appointments import DATE_PATTERN, new_id

SUBSTANCE_USE_FIELDS = (
    "substance_use_marijuana",
    "substance_use_cocaine",
    "substance_use_alcohol",
    "substance_use_cigarette",
)
SUBSTANCE_USE_NONE = "substance_use_none"


class Anamnesis(BaseModel):
    """Structured clinical intake record."""

    # Personal data
    civil_status: str = ""
    has_children: str = ""
    number_of_children: int | None = None
    had_abortion: str = ""
    occupation: str = ""
    education_level: str = ""

    # Family history
    mothers_name: str = ""
    mothers_relationship: str = ""
    fathers_name: str = ""
    fathers_relationship: str = ""
    has_siblings: str = ""
    number_of_siblings: int | None = None
    siblings_relationship: str = ""
    childhood_description: str = ""

    # General health
    continuous_medication: str = ""
    medications_details: str = ""
    relevant_medical_diagnosis: str = ""
    substance_use_marijuana: bool = False
    substance_use_cocaine: bool = False
    substance_use_alcohol: bool = False
    substance_use_cigarette: bool = False
    substance_use_none: bool = False
    sleep_quality: str = ""

    # Psychological aspects
    main_symptoms_sadness: bool = False
    main_symptoms_depression: bool = False
    main_symptoms_anxiety: bool = False
    main_symptoms_nervousness: bool = False
    main_symptoms_phobias: bool = False
    main_symptoms_other_fear: str = ""
    anxiety_level: str = ""
    irritability_level: str = ""
    sadness_level: str = ""
    carries_guilt: str = ""
    carries_injustice: str = ""
    suicidal_thoughts: str = ""
    suicidal_thoughts_comment: str = ""

    # Social life
    has_close_friends: str = ""
    social_consideration: str = ""
    physical_activity: str = ""
    financial_status: str = ""
    daily_routine: str = ""

    # Seeking help
    how_found_analysis: str = ""
    how_found_analysis_other: str = ""
    previous_therapy: str = ""
    previous_therapy_duration: str = ""
    main_reason: str = ""
    situation_start: str = ""
    triggering_event: str = ""
    expectations_analysis: str = ""

    general_observations: str = ""


class AnamnesisChange(BaseModel):
    """A single form edit: which field, and its new value."""

    field: str
    value: str | bool | int | None


class Patient(BaseModel):
    """Patient record as seen by scheduling and consultations."""

    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = ""
    phone: str = ""
    date_of_birth: str | None = Field(default=None, pattern=DATE_PATTERN)
    is_active: bool = True
    anamnesis: Anamnesis | None = None
