"""AdminService — privileged maintenance operations.

``clear`` wipes every POS record.  It exists to reset state between
independent test scenarios and is deliberately kept off
:class:`~campuscoffee.services.pos.PosService`: only code that is handed
an ``AdminService`` can call it.
"""

from __future__ import annotations

import structlog

from campuscoffee.domain.errors import PosError
from campuscoffee.services.base import BaseService
from campuscoffee.services.contracts import ClearResultData, dump_validated
from campuscoffee.services.result import ServiceResult
from campuscoffee.services.telemetry import traced

log = structlog.get_logger(__name__)


class AdminService(BaseService):
    """Reset operations for the POS directory."""

    @traced
    def clear(self) -> ServiceResult:
        """Remove all POS records. Idempotent: a second call removes nothing."""
        op = "clear"
        try:
            removed = self._repository.clear()
        except PosError as exc:
            return self._failure(op, exc)

        log.info("pos.cleared", removed=removed)
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(ClearResultData, {"removed": removed}),
        )
