# sessionauth/services/accounts/service.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError

from sessionauth.core.settings import AuthSettings
from sessionauth.models.user import User
from sessionauth.repositories.user import UserRepository
from sessionauth.services._shared.base import BaseService
from sessionauth.services._shared.errors import (
    AccountBlockedError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
)
from sessionauth.services._shared.ports import ActivationNotifier, UserStatus
from sessionauth.services.accounts.dto import AuthOut, LoginIn, RegisterIn, UserOut
from sessionauth.services.activation.dto import ActivationFailure
from sessionauth.services.activation.service import ActivationService
from sessionauth.services.sessions.service import SessionManager
from sessionauth.services.tokens.service import TokenService

log = logging.getLogger(__name__)

SORTABLE_FIELDS = ("name", "email", "status", "registration_time", "last_login_time")
DEFAULT_SORT = "registration_time"


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        status=user.status,
        registration_time=user.registration_time,
        last_login_time=user.last_login_time,
    )


class AccountService(BaseService):
    """
    Account flows around the token core: registration, login, activation and
    the bulk maintenance operations of the users list.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        sessions: SessionManager,
        tokens: TokenService,
        activation: ActivationService,
        notifier: ActivationNotifier,
    ) -> None:
        """
        :param settings: Provides ``backend_url`` for activation links.
        :param sessions: Issues token pairs after authentication.
        :param tokens: Used to revoke refresh tokens of blocked/deleted users.
        :param activation: Activation token lifecycle.
        :param notifier: Delivers activation links.
        """
        self.settings = settings
        self.sessions = sessions
        self.tokens = tokens
        self.activation = activation
        self.notifier = notifier

    # ------------------------------------------------------------------ #
    # Registration / login
    # ------------------------------------------------------------------ #

    def activation_url(self, token: str) -> str:
        return f"{self.settings.backend_url}/api/v1/auth/activate/{token}"

    def register(self, dto: RegisterIn) -> AuthOut:
        """
        Create an ``UNVERIFIED`` user, send its activation link and sign it in.

        :raises ConflictError: If the email is already registered.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "User with such an email already exists")
            user = User(name=dto.name, email=dto.email, status=UserStatus.UNVERIFIED)
            user.password = dto.password
            try:
                repo.add(user)
            except IntegrityError as exc:
                # Lost a race against a concurrent registration of the same email
                raise ConflictError("User", "User with such an email already exists") from exc
            out = to_user_out(user)

        token = self.activation.issue(out.id)
        self.notifier.send_activation(
            email=out.email, name=out.name, activation_url=self.activation_url(token)
        )
        log.info("account.registered user_id=%s", out.id)
        return AuthOut(user=out, tokens=self.sessions.create_session(out.id))

    def login(self, dto: LoginIn) -> AuthOut:
        """
        Check credentials and open a new session.

        :raises UnauthorizedError: Unknown email or wrong password.
        :raises AccountBlockedError: The account is blocked.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_by_email(dto.email)
            if user is None or not user.verify_password(dto.password):
                raise UnauthorizedError("Invalid email or password")
            if user.status is UserStatus.BLOCKED:
                raise AccountBlockedError()
            repo.touch_last_login(user, self.tokens.clock.now())
            out = to_user_out(user)

        return AuthOut(user=out, tokens=self.sessions.create_session(out.id))

    # ------------------------------------------------------------------ #
    # Activation
    # ------------------------------------------------------------------ #

    def activate(self, token: str) -> UserOut:
        """
        Verify ``token``, move the account out of ``UNVERIFIED``, then consume.

        The status write is committed before the token is consumed: a crash in
        between leaves a valid token, and replaying it on an already ``ACTIVE``
        account is a no-op. ``BLOCKED`` accounts stay blocked.

        :raises ActivationError: ``TokenNotFoundError``, ``TokenAlreadyUsedError``
            or ``TokenExpiredError``.
        """
        check = self.activation.verify(token)
        if not check.valid:
            raise (check.reason or ActivationFailure.NOT_FOUND).to_error()

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(int(check.user_id)) if check.user_id else None
            if user is None:
                raise NotFoundError("User", check.user_id or "")
            if user.status is UserStatus.UNVERIFIED:
                user.status = UserStatus.ACTIVE
                repo.flush()
            out = to_user_out(user)

        self.activation.consume(token)
        log.info("account.activated user_id=%s status=%s", out.id, out.status.value)
        return out

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_profile(self, user_id: int | str) -> UserOut:
        with self.ro_uow() as uow:
            user = uow.users.get(int(user_id))
            if user is None:
                raise NotFoundError("User", user_id)
            return to_user_out(user)

    def list_users(self, *, sort_by: str | None = None, order: str | None = None) -> list[UserOut]:
        """
        List every user. Unknown sort fields fall back to ``registration_time``;
        any order other than ``asc`` means descending.
        """
        field = sort_by if sort_by in SORTABLE_FIELDS else DEFAULT_SORT
        descending = (order or "desc").lower() != "asc"
        with self.ro_uow() as uow:
            users = uow.users.list_sorted(sort_by=field, descending=descending)
            return [to_user_out(u) for u in users]

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    def delete_many(self, user_ids: Iterable[int]) -> int:
        """Hard-delete users and revoke their refresh tokens. :returns: Count."""
        with self.rw_uow() as uow:
            deleted = uow.users.delete_many(user_ids)
        self._revoke_sessions(deleted)
        return len(deleted)

    def delete_unverified(self) -> int:
        """Hard-delete every ``UNVERIFIED`` user. :returns: Count."""
        with self.rw_uow() as uow:
            deleted = uow.users.delete_unverified()
        self._revoke_sessions(deleted)
        return len(deleted)

    def update_status_many(self, user_ids: Iterable[int], status: UserStatus) -> int:
        """
        Block or unblock users.

        The status is committed first so that admission denies the accounts
        immediately; refresh tokens of every listed user are revoked afterwards.

        :returns: Number of users whose status changed.
        """
        ids = list(user_ids)
        with self.rw_uow() as uow:
            count = uow.users.update_status_many(ids, status)
        if status is UserStatus.BLOCKED:
            self._revoke_sessions(ids)
        return count

    def _revoke_sessions(self, user_ids: Iterable[int]) -> None:
        for user_id in user_ids:
            self.tokens.revoke_all_for_user(user_id)
