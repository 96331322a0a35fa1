"""BaseService — shared foundation for the POS services.

Every service receives a :class:`PosRepository` at construction time;
nothing is looked up from a global registry.  Repository errors are
domain exceptions; :meth:`BaseService._failure` turns them into
``ServiceResult`` errors so no exception crosses the service boundary
unreported.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from campuscoffee.domain.errors import StorageError
from campuscoffee.services.result import ServiceResult

if TYPE_CHECKING:
    from campuscoffee.domain.errors import PosError
    from campuscoffee.infrastructure.repositories.pos import PosRepository

log = structlog.get_logger(__name__)


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class PosService(BaseService):
            def list(self) -> ServiceResult:
                items = self._repository.find_all()
                ...
    """

    def __init__(self, repository: PosRepository) -> None:
        self._repository = repository

    @staticmethod
    def _failure(op: str, exc: PosError, **extra: Any) -> ServiceResult:
        """Build a failed result from a domain error.

        Storage failures are logged at error level: their effect is unknown
        and the caller has to verify or retry.
        """
        if isinstance(exc, StorageError):
            log.error("storage.failure", op=op, error=exc.message, exc_info=exc)
        else:
            log.debug("pos.rejected", op=op, code=exc.code, detail=exc.detail)
        return ServiceResult.failure(op, exc, **extra)
