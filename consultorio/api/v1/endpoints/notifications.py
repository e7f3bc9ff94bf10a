"""Post-login notification endpoints."""

from fastapi import APIRouter, status

from consultorio.dependencies import Services
from consultorio.schemas.notifications import NotificationLogEntry, NotificationSequenceState

router = APIRouter()


@router.post(
    "/login",
    response_model=NotificationSequenceState,
    status_code=status.HTTP_200_OK,
    summary="Run the post-login checks",
)
async def start_login_sequence(services: Services) -> NotificationSequenceState:
    """
    Start the notification chain for a fresh login.

    Args:
        services: Service container

    Returns:
        First step with something to show, or a completed state
    """
    return services.notifications.on_login()


@router.get("/current", response_model=NotificationSequenceState, summary="Step being shown")
async def current_step(services: Services) -> NotificationSequenceState:
    return services.notifications.current_state()


@router.post("/dismiss", response_model=NotificationSequenceState, summary="Dismiss step")
async def dismiss_step(services: Services) -> NotificationSequenceState:
    return services.notifications.dismiss()


@router.post(
    "/onboarding/setup",
    response_model=NotificationSequenceState,
    summary="Go to setup from onboarding",
)
async def begin_setup(services: Services) -> NotificationSequenceState:
    return services.notifications.begin_setup()


@router.post(
    "/reminders/{appointment_id}/sent",
    response_model=NotificationSequenceState,
    summary="Mark reminder as sent",
)
async def mark_reminder_sent(appointment_id: str, services: Services) -> NotificationSequenceState:
    return services.notifications.mark_reminder_sent(appointment_id)


@router.get("/logs", response_model=list[NotificationLogEntry], summary="Notification history")
async def notification_logs(services: Services) -> list[NotificationLogEntry]:
    return services.notification_log.list_all()
