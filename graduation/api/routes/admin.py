"""
Administrator routes.

``/admin/create`` and ``/admin/login`` are open; every other endpoint
requires a bearer token from ``/admin/login``.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from graduation.api.dependencies import get_admin_service, get_current_admin, get_invitation_service
from graduation.api.models import (
    AdminOut,
    AttendeeOut,
    CreateAdminRequest,
    CreateAdminResponse,
    ErrorResponse,
    GenerateInvitationsRequest,
    GenerateInvitationsResponse,
    GraduateDetailOut,
    InvitationOut,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegistrationDetailResponse,
    RegistrationsResponse,
    RegistrationSummaryOut,
    SendInvitationsRequest,
    SendInvitationsResponse,
    SendResultOut,
    UpsertAdminRequest,
)
from graduation.domain.admins import AdminService, UpsertOutcome
from graduation.domain.exceptions import (
    AdministratorExists,
    Forbidden,
    GraduateNotFound,
    Unauthorized,
    ValidationError,
)
from graduation.domain.invitations import STATUS_SUCCESS, InvitationRequest, InvitationService

router = APIRouter(prefix="/admin", tags=["admin"])

_auth_errors = {401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"}}


@router.post(
    "/create",
    response_model=CreateAdminResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Username or email taken"}},
    summary="Create an administrator",
)
def create_admin(
    request_data: CreateAdminRequest,
    service: AdminService = Depends(get_admin_service),
) -> CreateAdminResponse:
    try:
        service.create_admin(request_data.username, request_data.password, request_data.email)
    except AdministratorExists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already in use",
        ) from None
    return CreateAdminResponse(success=True, message="User successfully created")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid username or password"}},
    summary="Log in as an administrator",
)
def login(
    request_data: LoginRequest,
    service: AdminService = Depends(get_admin_service),
) -> LoginResponse:
    try:
        result = service.login(request_data.username, request_data.password)
    except Unauthorized:
        # Same message for unknown user and wrong password
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        ) from None

    return LoginResponse(
        token=result.token,
        user=AdminOut(
            id=result.admin.id,
            username=result.admin.username,
            email=result.admin.email,
            role=result.admin.role,
        ),
    )


@router.get(
    "/registrations",
    response_model=RegistrationsResponse,
    responses=_auth_errors,
    summary="List graduate registrations",
)
def list_registrations(
    _admin: dict[str, Any] = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
) -> RegistrationsResponse:
    return RegistrationsResponse(
        graduates=[
            RegistrationSummaryOut(
                id=summary.id,
                first_name=summary.first_name,
                last_name=summary.last_name,
                email=summary.email,
                promotion=summary.promotion,
                is_attending=summary.is_attending,
                registration_complete=summary.registration_complete,
                attendee_count=summary.attendee_count,
            )
            for summary in service.list_registrations()
        ]
    )


@router.get(
    "/registrations/{graduate_id}",
    response_model=RegistrationDetailResponse,
    responses={**_auth_errors, 404: {"model": ErrorResponse, "description": "Graduate not found"}},
    summary="Get one graduate with guests",
)
def get_registration(
    graduate_id: int,
    _admin: dict[str, Any] = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
) -> RegistrationDetailResponse:
    try:
        detail = service.get_registration(graduate_id)
    except GraduateNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Graduate not found") from None

    graduate = detail.graduate
    return RegistrationDetailResponse(
        graduate=GraduateDetailOut(
            id=graduate.id,
            first_name=graduate.first_name,
            last_name=graduate.last_name,
            email=graduate.email,
            promotion=graduate.promotion,
            is_attending=graduate.is_attending,
            registration_complete=graduate.registration_complete,
            registration_stage=graduate.registration_stage,
            registration_date=graduate.registration_date,
            last_updated=graduate.last_updated,
        ),
        attendees=[
            AttendeeOut(
                id=attendee.id,
                first_name=attendee.first_name,
                last_name=attendee.last_name,
                date_of_birth=attendee.date_of_birth,
            )
            for attendee in detail.attendees
        ],
    )


@router.post(
    "/generate-invitations",
    response_model=GenerateInvitationsResponse,
    responses={**_auth_errors, 400: {"model": ErrorResponse, "description": "Empty graduate list"}},
    summary="Create or reset graduates and issue Level 1 links",
)
def generate_invitations(
    request_data: GenerateInvitationsRequest,
    _admin: dict[str, Any] = Depends(get_current_admin),
    service: InvitationService = Depends(get_invitation_service),
) -> GenerateInvitationsResponse:
    results = service.generate_invitations(
        [
            InvitationRequest(
                email=graduate.email,
                first_name=graduate.first_name,
                last_name=graduate.last_name,
                promotion=graduate.promotion,
            )
            for graduate in request_data.graduates
        ]
    )
    generated = sum(1 for result in results if result.status == STATUS_SUCCESS)
    return GenerateInvitationsResponse(
        message=f"Successfully generated {generated} invitation links",
        invitations=[
            InvitationOut(
                email=result.email,
                status=result.status,
                message=result.message,
                token=result.token,
                link=result.link,
            )
            for result in results
        ],
    )


@router.post(
    "/send-invitations",
    response_model=SendInvitationsResponse,
    responses={**_auth_errors, 400: {"model": ErrorResponse, "description": "Empty email list"}},
    summary="Email Level 1 links",
)
def send_invitations(
    request_data: SendInvitationsRequest,
    _admin: dict[str, Any] = Depends(get_current_admin),
    service: InvitationService = Depends(get_invitation_service),
) -> SendInvitationsResponse:
    summary = service.send_invitations(request_data.emails)
    return SendInvitationsResponse(
        message=f"Sent {summary.sent} invitations",
        sent=summary.sent,
        results=[
            SendResultOut(email=result.email, status=result.status, message=result.message)
            for result in summary.results
        ],
    )


@router.post(
    "/users",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses={
        **_auth_errors,
        201: {"model": MessageResponse, "description": "Administrator created"},
        400: {"model": ErrorResponse, "description": "Missing field or password"},
        403: {"model": ErrorResponse, "description": "Caller is not an admin"},
        409: {"model": ErrorResponse, "description": "Email taken by another administrator"},
    },
    summary="Create or update an administrator",
)
def upsert_admin(
    request_data: UpsertAdminRequest,
    response: Response,
    admin: dict[str, Any] = Depends(get_current_admin),
    service: AdminService = Depends(get_admin_service),
) -> MessageResponse:
    try:
        outcome = service.upsert_admin(
            admin,
            request_data.username,
            request_data.email,
            request_data.role,
            password=request_data.password,
        )
    except Forbidden:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized") from None
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None
    except AdministratorExists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already in use",
        ) from None

    if outcome is UpsertOutcome.CREATED:
        response.status_code = status.HTTP_201_CREATED
        return MessageResponse(message="Admin user created successfully")
    if outcome is UpsertOutcome.UPDATED:
        return MessageResponse(message="Admin user updated successfully")
    return MessageResponse(message="No changes made")
