"""Consultation session endpoints.

There is a single practitioner, hence a single session at ``/session``.
"""

from fastapi import APIRouter, status

from consultorio.dependencies import Services
from consultorio.schemas.notes import (
    EvolutionPoint,
    NoteConfirmRequest,
    NoteDraft,
    NoteDraftRequest,
    NoteUpdate,
    SessionNote,
)
from consultorio.schemas.patients import Anamnesis, AnamnesisChange
from consultorio.schemas.sessions import (
    ConsultationSessionView,
    PaymentRequest,
    Receipt,
    SessionOpenRequest,
)

router = APIRouter()


@router.post(
    "/",
    response_model=ConsultationSessionView,
    status_code=status.HTTP_201_CREATED,
    summary="Open a patient's record in consultation mode",
)
async def open_session(data: SessionOpenRequest, services: Services) -> ConsultationSessionView:
    return services.sessions.open(data.patient_id)


@router.get("/", response_model=ConsultationSessionView, summary="Current session")
async def get_session(services: Services) -> ConsultationSessionView:
    return services.sessions.view()


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT, summary="Leave the record")
async def close_session(services: Services) -> None:
    services.sessions.close()


@router.post("/start", response_model=ConsultationSessionView, summary="Start consultation")
async def start_consultation(services: Services) -> ConsultationSessionView:
    return services.sessions.start()


@router.post("/end", response_model=ConsultationSessionView, summary="End consultation")
async def end_consultation(services: Services) -> ConsultationSessionView:
    return services.sessions.end()


@router.post("/notes/draft", response_model=NoteDraft, summary="Capture note text")
async def draft_note(data: NoteDraftRequest, services: Services) -> NoteDraft:
    return services.sessions.draft_note(data.content)


@router.post(
    "/notes/confirm",
    response_model=SessionNote,
    status_code=status.HTTP_201_CREATED,
    summary="Save the captured note with its evaluation",
)
async def confirm_note(data: NoteConfirmRequest, services: Services) -> SessionNote:
    return services.sessions.confirm_note(data.evaluation)


@router.put("/notes/{note_id}", response_model=SessionNote, summary="Edit a saved note")
async def edit_note(note_id: str, data: NoteUpdate, services: Services) -> SessionNote:
    return services.sessions.edit_note(note_id, data.content, data.evaluation)


@router.get(
    "/evolution",
    response_model=list[EvolutionPoint],
    summary="Evaluation trend of the session's patient",
)
async def evolution(services: Services) -> list[EvolutionPoint]:
    return services.notes.evolution(services.sessions.view().patient_id)


@router.put("/anamnesis", response_model=ConsultationSessionView, summary="Save anamnesis")
async def save_anamnesis(data: Anamnesis, services: Services) -> ConsultationSessionView:
    return services.sessions.save_anamnesis(data)


@router.patch(
    "/anamnesis",
    response_model=ConsultationSessionView,
    summary="Change one anamnesis field",
)
async def update_anamnesis_field(
    data: AnamnesisChange, services: Services
) -> ConsultationSessionView:
    return services.sessions.update_anamnesis_field(data)


@router.post(
    "/finalize",
    response_model=ConsultationSessionView,
    summary="Move an ended consultation to payment",
)
async def proceed_to_payment(services: Services) -> ConsultationSessionView:
    return services.sessions.proceed_to_payment()


@router.post("/payment", response_model=Receipt, summary="Confirm payment")
async def confirm_payment(data: PaymentRequest, services: Services) -> Receipt:
    """
    Complete today's appointment and record the income.

    Args:
        data: Chosen payment method
        services: Service container

    Returns:
        Receipt data offered for printing
    """
    return services.sessions.confirm_payment(data.method)


@router.post("/receipt", response_model=Receipt, summary="Accept receipt and end session")
async def accept_receipt(services: Services) -> Receipt:
    return services.sessions.accept_receipt()


@router.delete(
    "/receipt",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Decline receipt and end session",
)
async def decline_receipt(services: Services) -> None:
    services.sessions.decline_receipt()
