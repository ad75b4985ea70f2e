"""
Graduate registration routes.

Public endpoints; Levels 2 and 3 are authorized by the stage token in the path.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from graduation.api.dependencies import get_registration_service
from graduation.api.models import (
    AttendeeOut,
    ErrorResponse,
    GraduateName,
    Level1Request,
    Level2Request,
    Level3Response,
    Level3UpdateRequest,
    MessageResponse,
)
from graduation.domain.exceptions import (
    GraduateNotFound,
    InvalidToken,
    ValidationError,
)
from graduation.domain.ports import AttendeeEntry
from graduation.domain.registration import RegistrationService

router = APIRouter(prefix="/registration", tags=["registration"])

# Identical for unknown, expired and wrong-stage tokens
INVALID_LINK_MESSAGE = "Invalid or expired registration link"

_invalid_link = {404: {"model": ErrorResponse, "description": INVALID_LINK_MESSAGE}}


def _invalid_link_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=INVALID_LINK_MESSAGE)


@router.post(
    "/level1",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid field"},
        404: {"model": ErrorResponse, "description": "Email was not invited"},
    },
    summary="Confirm attendance",
)
def submit_level1(
    request_data: Level1Request,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    """
    Confirm graduate details and attendance.

    Attending graduates receive the Level 2 link by email.
    """
    try:
        service.submit_level1(
            request_data.email,
            request_data.first_name,
            request_data.last_name,
            request_data.promotion,
            request_data.is_attending,
        )
    except GraduateNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Your email is not registered. Please use the email address "
            "where you received the invitation.",
        ) from None

    if request_data.is_attending:
        return MessageResponse(
            message="Registration successful. Please check your email for the next step."
        )
    return MessageResponse(message="Thank you for informing us that you will not be attending.")


@router.post(
    "/level2/{token}",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing count or too many guests"},
        **_invalid_link,
    },
    summary="Register guests",
)
def submit_level2(
    token: str,
    request_data: Level2Request,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    """Replace the guest list; the Level 3 link is emailed on success."""
    entries = [
        AttendeeEntry(
            first_name=attendee.first_name,
            last_name=attendee.last_name,
            date_of_birth=attendee.date_of_birth,
        )
        for attendee in request_data.attendees
    ]
    try:
        service.submit_level2(token, request_data.attendee_count, entries)
    except InvalidToken:
        raise _invalid_link_error() from None
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None

    return MessageResponse(
        message="Attendee registration successful. Please check your email for the confirmation."
    )


@router.get(
    "/level3/{token}",
    response_model=Level3Response,
    responses=_invalid_link,
    summary="Get guest list",
)
def get_level3(
    token: str,
    service: RegistrationService = Depends(get_registration_service),
) -> Level3Response:
    try:
        guest_list = service.get_level3(token)
    except InvalidToken:
        raise _invalid_link_error() from None

    return Level3Response(
        graduate=GraduateName(
            first_name=guest_list.graduate.first_name,
            last_name=guest_list.graduate.last_name,
        ),
        attendees=[
            AttendeeOut(
                id=attendee.id,
                first_name=attendee.first_name,
                last_name=attendee.last_name,
                date_of_birth=attendee.date_of_birth,
            )
            for attendee in guest_list.attendees
        ],
    )


@router.put(
    "/level3/{token}",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Incomplete guest or too many guests"},
        **_invalid_link,
    },
    summary="Update guest list",
)
def update_level3(
    token: str,
    request_data: Level3UpdateRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    """Amend guests and confirm the registration. The link stays valid."""
    entries = [
        AttendeeEntry(
            id=attendee.id,
            first_name=attendee.first_name,
            last_name=attendee.last_name,
            date_of_birth=attendee.date_of_birth,
        )
        for attendee in request_data.attendees
    ]
    try:
        service.update_level3(token, entries)
    except InvalidToken:
        raise _invalid_link_error() from None
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None

    return MessageResponse(message="Attendee information updated successfully.")
