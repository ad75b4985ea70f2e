"""
Invitation batch processing for administrators.

Two phases, both processed entry by entry so that one bad row never
affects the others:

- generate: upsert each graduate by email with a fresh stage token,
  restarting registration at stage 1
- send: mail the Level 1 link for graduates that already hold a token
"""

import logging
from dataclasses import dataclass

from .ports import Graduate, GraduateRepository, NotificationSender
from .registration import normalize_email
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass
class InvitationRequest:
    email: str
    first_name: str | None = None
    last_name: str | None = None
    promotion: str | None = None


@dataclass
class GeneratedInvitation:
    email: str
    status: str
    message: str
    token: str | None = None
    link: str | None = None


@dataclass
class SendResult:
    email: str
    status: str
    message: str


@dataclass
class SendSummary:
    results: list[SendResult]

    @property
    def sent(self) -> int:
        return sum(1 for result in self.results if result.status == STATUS_SUCCESS)


@dataclass
class InvitationService:
    """Domain service for bulk invitation issuance."""

    graduates: GraduateRepository
    notifier: NotificationSender
    tokens: TokenIssuer
    frontend_url: str

    def generate_invitations(self, requests: list[InvitationRequest]) -> list[GeneratedInvitation]:
        """
        Create or reset one graduate per request and hand out Level 1 links.

        Re-inviting an existing graduate resets their stage to 1 and clears
        completion, which is how an administrator restarts a registration.

        Returns:
            One result per request, in request order
        """
        results = []
        for request in requests:
            try:
                results.append(self._generate_one(request))
            except Exception:
                logger.exception("Failed to generate invitation for %s", request.email)
                results.append(
                    GeneratedInvitation(
                        email=request.email,
                        status=STATUS_ERROR,
                        message="Failed to generate invitation",
                    )
                )
        logger.info(
            "Generated %d of %d invitation(s)",
            sum(1 for result in results if result.status == STATUS_SUCCESS),
            len(results),
        )
        return results

    def send_invitations(self, emails: list[str]) -> SendSummary:
        """
        Mail the stored Level 1 link to each address.

        Unknown graduates and transport failures are reported per address.
        """
        results = []
        for email in emails:
            try:
                results.append(self._send_one(email))
            except Exception:
                logger.exception("Failed to send invitation to %s", email)
                results.append(SendResult(email, STATUS_ERROR, "Failed to send invitation"))
        summary = SendSummary(results)
        logger.info("Sent %d of %d invitation(s)", summary.sent, len(results))
        return summary

    def _generate_one(self, request: InvitationRequest) -> GeneratedInvitation:
        email = normalize_email(request.email)
        if not email:
            return GeneratedInvitation(
                email=request.email, status=STATUS_ERROR, message="Email is required"
            )

        issued = self.tokens.issue()
        if self.graduates.find_by_email(email) is None:
            self.graduates.create_invited(
                email,
                request.first_name or "",
                request.last_name or "",
                request.promotion or "",
                issued.token,
                issued.expiry,
            )
            message = "Graduate invited"
        else:
            self.graduates.reset_invitation(email, issued.token, issued.expiry)
            message = "Invitation reissued"

        return GeneratedInvitation(
            email=email,
            status=STATUS_SUCCESS,
            message=message,
            token=issued.token,
            link=self._level1_link(issued.token),
        )

    def _send_one(self, email: str) -> SendResult:
        graduate: Graduate | None = self.graduates.find_by_email(normalize_email(email))
        if graduate is None:
            return SendResult(email, STATUS_ERROR, "Graduate not found")
        if not graduate.registration_token:
            return SendResult(email, STATUS_ERROR, "No invitation generated")

        self.notifier.send_invitation(graduate, self._level1_link(graduate.registration_token))
        return SendResult(email, STATUS_SUCCESS, "Invitation sent successfully")

    def _level1_link(self, token: str) -> str:
        return f"{self.frontend_url.rstrip('/')}/registration/level1/{token}"
