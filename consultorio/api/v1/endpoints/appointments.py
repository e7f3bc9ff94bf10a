"""Appointment and availability endpoints."""

from datetime import date

from fastapi import APIRouter, Query, status

from consultorio.dependencies import Services
from consultorio.schemas.appointments import (
    Appointment,
    AppointmentAgenda,
    AppointmentCreate,
    AppointmentReschedule,
    DayAvailability,
)

router = APIRouter()


@router.post(
    "/",
    response_model=Appointment,
    status_code=status.HTTP_201_CREATED,
    summary="Book new appointment",
)
async def create_appointment(data: AppointmentCreate, services: Services) -> Appointment:
    """
    Book an appointment.

    Args:
        data: Patient, slot and consultation type
        services: Service container

    Returns:
        Created appointment
    """
    return services.appointments.create_appointment(
        data.patient_id, data.date, data.time, data.consultation_type_id
    )


@router.get(
    "/",
    response_model=AppointmentAgenda,
    status_code=status.HTTP_200_OK,
    summary="List upcoming and past appointments",
)
async def list_appointments(services: Services) -> AppointmentAgenda:
    return services.appointments.agenda()


@router.get(
    "/availability/{day}",
    response_model=DayAvailability,
    status_code=status.HTTP_200_OK,
    summary="Availability of one day",
)
async def day_availability(day: date, services: Services) -> DayAvailability:
    return services.availability.day_availability(
        day.isoformat(), services.appointments.list_all()
    )


@router.get(
    "/availability",
    response_model=list[DayAvailability],
    status_code=status.HTTP_200_OK,
    summary="Availability of every day in a month",
)
async def month_availability(
    services: Services,
    year: int = Query(..., ge=1900, le=9999),
    month: int = Query(..., ge=1, le=12),
) -> list[DayAvailability]:
    return services.availability.month_availability(year, month, services.appointments.list_all())


@router.get(
    "/{appointment_id}",
    response_model=Appointment,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(appointment_id: str, services: Services) -> Appointment:
    return services.appointments.get_appointment(appointment_id)


@router.post(
    "/{appointment_id}/reschedule",
    response_model=Appointment,
    status_code=status.HTTP_200_OK,
    summary="Move appointment to another slot",
)
async def reschedule_appointment(
    appointment_id: str,
    data: AppointmentReschedule,
    services: Services,
) -> Appointment:
    """
    Reschedule an appointment; price and consultation type are kept.

    Args:
        appointment_id: Appointment ID
        data: New slot
        services: Service container

    Returns:
        Rescheduled appointment
    """
    return services.appointments.reschedule_appointment(appointment_id, data.date, data.time)


@router.post(
    "/{appointment_id}/cancel",
    response_model=Appointment,
    status_code=status.HTTP_200_OK,
    summary="Cancel appointment",
)
async def cancel_appointment(appointment_id: str, services: Services) -> Appointment:
    return services.appointments.mark_canceled(appointment_id)
