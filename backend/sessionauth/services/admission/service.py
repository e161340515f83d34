# sessionauth/services/admission/service.py
from __future__ import annotations

import logging

from sessionauth.services._shared.errors import InvalidCredentialError
from sessionauth.services._shared.ports import UserDirectory, UserStatus
from sessionauth.services.admission.dto import Admission, AdmissionDecision
from sessionauth.services.tokens.service import TokenService

log = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AdmissionService:
    """
    Request-admission decision for protected operations.

    Two modes:

    - ``check_account=True``: after the access token verifies, the live account
      is loaded; a missing account is rejected as invalid and a blocked one as
      forbidden. This is how blocking takes effect before access tokens expire.
    - ``check_account=False``: signature and expiry only. Used by operations
      that must work for deleted or blocked accounts (logout).

    Store or database failures propagate to the caller unchanged.
    """

    def __init__(self, *, tokens: TokenService, users: UserDirectory) -> None:
        self.tokens = tokens
        self.users = users

    @staticmethod
    def extract_bearer(authorization_header: str | None) -> str | None:
        """Return the token of a ``Bearer`` header, or ``None`` if absent."""
        if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
            return None
        token = authorization_header[len(BEARER_PREFIX):].strip()
        return token or None

    def admit(self, authorization_header: str | None, *, check_account: bool = True) -> Admission:
        """
        Decide whether a request carrying ``authorization_header`` is admitted.

        :param authorization_header: Raw ``Authorization`` header value.
        :param check_account: Re-check the live account status.
        :returns: The admission decision, never raises for credential problems.
        :rtype: Admission
        """
        token = self.extract_bearer(authorization_header)
        if token is None:
            return Admission(AdmissionDecision.REJECTED_MISSING, detail="Access token required")

        try:
            claims = self.tokens.verify_access(token)
        except InvalidCredentialError as exc:
            log.debug("admission.invalid_token reason=%s", exc)
            return Admission(AdmissionDecision.REJECTED_INVALID, detail="Invalid access token")

        if not check_account:
            return Admission(AdmissionDecision.ADMITTED, subject=claims.subject)

        account = self.users.get_account(claims.subject)
        if account is None:
            return Admission(AdmissionDecision.REJECTED_INVALID, detail="User not found")
        if account.status is UserStatus.BLOCKED:
            return Admission(AdmissionDecision.REJECTED_FORBIDDEN, detail="User is blocked")
        return Admission(AdmissionDecision.ADMITTED, subject=claims.subject)
