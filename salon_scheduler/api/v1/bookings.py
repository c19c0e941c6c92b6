from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from salon_scheduler.api.v1.converters import conflict_schema
from salon_scheduler.api.v1.schemas import (
    BookingRequestSchema,
    BookingResponseSchema,
    ConfirmationRequestSchema,
    ConfirmationResponseSchema,
)
from salon_scheduler.application.dto.requests import BookingRequest
from salon_scheduler.application.use_cases.booking import BookingStatus, BookingUseCase
from salon_scheduler.application.use_cases.resolve_confirmation import (
    ConfirmationOutcome,
    ResolveConfirmationUseCase,
)
from salon_scheduler.wiring.dependencies import get_booking_use_case, get_resolve_confirmation_use_case

router = APIRouter()
logger = logging.getLogger(__name__)

OUTCOME_MESSAGES = {
    ConfirmationOutcome.confirmed: "Appointment confirmed",
    ConfirmationOutcome.already_confirmed: "Appointment already confirmed",
    ConfirmationOutcome.not_found: "No appointment found with this token",
    ConfirmationOutcome.expired_reissued: "Token expired, new email sent",
    ConfirmationOutcome.cancelled: "Appointment cancelled",
}


@router.post("/bookings", response_model=BookingResponseSchema, status_code=201)
async def create_booking(
    req: BookingRequestSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        result = await uc.book(BookingRequest(**req.model_dump()))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if result.status == BookingStatus.not_found:
        raise HTTPException(status_code=404, detail=result.error)
    if result.status == BookingStatus.slot_taken:
        raise HTTPException(
            status_code=409,
            detail={
                "message": result.error,
                "conflicts": [conflict_schema(c).model_dump() for c in result.conflicts],
            },
        )

    return BookingResponseSchema(
        agreement_id=result.agreement_id,
        status=result.status.value,
        confirmation_sent=result.confirmation_sent,
        message=result.error,
    )


@router.post("/bookings/confirm", response_model=ConfirmationResponseSchema)
async def confirm_booking(
    req: ConfirmationRequestSchema,
    uc: ResolveConfirmationUseCase = Depends(get_resolve_confirmation_use_case),
):
    if not req.token.strip():
        raise HTTPException(status_code=400, detail="Token is required")

    outcome = await uc.resolve_token(req.token)
    message = OUTCOME_MESSAGES[outcome]
    if outcome not in (ConfirmationOutcome.confirmed, ConfirmationOutcome.already_confirmed):
        logger.warning("Confirmation not completed", extra={"outcome": outcome.value})
        raise HTTPException(status_code=404, detail=message)

    return ConfirmationResponseSchema(outcome=outcome.value, message=message)
