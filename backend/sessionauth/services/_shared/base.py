# sessionauth/services/_shared/base.py
from __future__ import annotations

from sessionauth.core import errors as api_errors
from sessionauth.services._shared.errors import (
    ActivationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from sessionauth.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

# First match wins; subclasses must precede their bases
_HTTP_ERRORS: tuple[tuple[type[ServiceError], type[api_errors.APIError]], ...] = (
    (UnauthorizedError, api_errors.Unauthorized),
    (ForbiddenError, api_errors.Forbidden),
    (NotFoundError, api_errors.NotFound),
    (ConflictError, api_errors.Conflict),
)


class BaseService:
    """
    Base for services that read or write accounts in the database.

    Subclasses open a unit of work per operation through :meth:`rw_uow` or
    :meth:`ro_uow` and never touch ``db.session`` themselves. Routes call
    :meth:`translate_exceptions` to turn a :class:`ServiceError` into the
    matching HTTP error.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Open a read-only unit of work.

        :param isolation: Isolation level; defaults to ``READ COMMITTED``.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION
        )

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map a service error to an API error; anything else is returned as is.

        Activation failures become 400 ``activation_failed`` with the reason
        (``TokenNotFound``, ``TokenAlreadyUsed``, ``TokenExpired``) in
        ``details``. Other service errors without a mapping become 400
        ``bad_request``.
        """
        for service_cls, api_cls in _HTTP_ERRORS:
            if isinstance(exc, service_cls):
                return api_cls(str(exc))

        if isinstance(exc, ActivationError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="activation_failed",
                details={"reason": type(exc).__name__.removesuffix("Error")},
            )
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")
        return exc
