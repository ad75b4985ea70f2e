"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from datetime import timedelta
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from graduation.adapters.auth.jwt_codec import JwtTokenCodec
from graduation.adapters.repository.postgres import (
    PostgresAdministratorRepository,
    PostgresAttendeeRepository,
    PostgresGraduateRepository,
)
from graduation.adapters.smtp import ConsoleNotificationSender, EventDetails, SmtpNotificationSender
from graduation.config.settings import Settings, get_settings
from graduation.domain.admins import AdminService
from graduation.domain.exceptions import Unauthorized
from graduation.domain.invitations import InvitationService
from graduation.domain.ports import NotificationSender
from graduation.domain.registration import RegistrationService
from graduation.domain.tokens import TokenIssuer


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def build_notifier(settings: Settings) -> NotificationSender:
    """Build the notification sender selected by ``email_backend``."""
    if settings.email_backend == "smtp":
        event = EventDetails(
            organization_name=settings.organization_name,
            ceremony_date=settings.ceremony_date,
            ceremony_time=settings.ceremony_time,
            ceremony_venue=settings.ceremony_venue,
            response_deadline=settings.response_deadline,
            max_guests=settings.max_guests,
        )
        return SmtpNotificationSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.email_from,
            event=event,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleNotificationSender()


def get_notifier(settings: Settings = Depends(get_settings)) -> NotificationSender:
    return build_notifier(settings)


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer(
        mode=settings.token_expiry_mode,
        fixed_expiry=settings.token_fixed_expiry,
        rolling_hours=settings.token_rolling_hours,
    )


def get_registration_service(
    request: Request,
    settings: Settings = Depends(get_settings),
    notifier: NotificationSender = Depends(get_notifier),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repositories, token issuer and notifier for the domain service.
    """
    pool = get_pool(request)
    return RegistrationService(
        graduates=PostgresGraduateRepository(pool),
        attendees=PostgresAttendeeRepository(pool),
        notifier=notifier,
        tokens=tokens,
        frontend_url=settings.frontend_url,
        max_guests=settings.max_guests,
    )


def get_invitation_service(
    request: Request,
    settings: Settings = Depends(get_settings),
    notifier: NotificationSender = Depends(get_notifier),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> InvitationService:
    return InvitationService(
        graduates=PostgresGraduateRepository(get_pool(request)),
        notifier=notifier,
        tokens=tokens,
        frontend_url=settings.frontend_url,
    )


def get_admin_service(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AdminService:
    pool = get_pool(request)
    return AdminService(
        administrators=PostgresAdministratorRepository(pool),
        graduates=PostgresGraduateRepository(pool),
        attendees=PostgresAttendeeRepository(pool),
        token_codec=JwtTokenCodec(
            settings.jwt_secret,
            settings.jwt_algorithm,
            timedelta(hours=settings.admin_token_ttl_hours),
        ),
        bcrypt_cost=settings.bcrypt_cost,
    )


# Bearer security scheme for OpenAPI documentation; missing headers are
# reported as 401 below rather than FastAPI's default 403.
http_bearer = HTTPBearer(auto_error=False)


def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AdminService = Depends(get_admin_service),
) -> dict[str, Any]:
    """
    Decode the caller's bearer token.

    Returns:
        Token claims: id, username, role
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return service.authenticate(credentials.credentials)
    except Unauthorized:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
