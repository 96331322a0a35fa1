"""PosService — domain rules above POS storage.

Pipeline for mutations: VALIDATE → STAMP → PERSIST → RESPOND

- VALIDATE: :func:`validate_draft` checks every caller-owned field once.
- STAMP: the service is the only writer of ``created_at``/``updated_at``;
  ``id`` comes from the store.
- PERSIST: the repository enforces name uniqueness transactionally.
- RESPOND: the stored entity, serialized through the payload contracts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog

from campuscoffee.config.models import PosConfig
from campuscoffee.domain.errors import PosError
from campuscoffee.domain.pos import PointOfSale, PosDraft, validate_draft
from campuscoffee.services._helpers import not_before, utc_now
from campuscoffee.services.base import BaseService
from campuscoffee.services.contracts import (
    BatchResultData,
    PosItem,
    PosListResultData,
    dump_validated,
)
from campuscoffee.services.result import ServiceError, ServiceResult
from campuscoffee.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from campuscoffee.infrastructure.repositories.pos import PosRepository

log = structlog.get_logger(__name__)

DraftInput = PosDraft | Mapping[str, Any]


class PosService(BaseService):
    """Create, update, list, and look up Points of Sale."""

    def __init__(
        self,
        repository: PosRepository,
        config: PosConfig | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(repository)
        self._rules = (config or PosConfig()).validation_rules()
        self._clock = clock

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def create(self, draft: DraftInput) -> ServiceResult:
        """Validate *draft*, stamp it, and store it as a new POS."""
        op = "create_pos"
        try:
            with trace_span("validate"):
                valid = validate_draft(draft, self._rules)
            now = self._clock()
            with trace_span("persist"):
                pos = self._repository.insert(
                    {**valid.model_dump(), "created_at": now, "updated_at": now}
                )
        except PosError as exc:
            return self._failure(op, exc)

        log.info("pos.created", id=pos.id, name=pos.name)
        return ServiceResult(ok=True, op=op, data=_item(pos))

    @traced
    def update(self, pos_id: int, draft: DraftInput) -> ServiceResult:
        """Replace every caller-owned field of record *pos_id*.

        ``id`` and ``created_at`` are kept; ``updated_at`` is refreshed and
        never moves backwards.  Keeping the current name is not a conflict.
        """
        op = "update_pos"
        try:
            with trace_span("validate"):
                valid = validate_draft(draft, self._rules)
            existing = self._repository.find_by_id(pos_id)
            updated_at = not_before(self._clock(), existing.updated_at)
            changed = existing.changed_fields(valid)
            with trace_span("persist"):
                pos = self._repository.update(
                    pos_id, {**valid.model_dump(), "updated_at": updated_at}
                )
        except PosError as exc:
            return self._failure(op, exc)

        log.info("pos.updated", id=pos.id, fields_changed=changed)
        return ServiceResult(ok=True, op=op, data={**_item(pos), "fields_changed": changed})

    @traced
    def create_batch(self, drafts: Iterable[DraftInput], *, partial: bool = False) -> ServiceResult:
        """Create several POS in order.

        Stops at the first failure unless *partial* is True.  Records created
        before a failure stay stored.
        """
        op = "create_batch"
        created: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        items = list(drafts)

        for index, draft in enumerate(items):
            result = self.create(draft)
            if result.ok:
                created.append(result.data)
                continue
            assert result.error is not None
            errors.append(
                {"index": index, "code": result.error.code, "error": result.error.message}
            )
            if not partial:
                return ServiceResult(
                    ok=False,
                    op=op,
                    data=dump_validated(BatchResultData, {"created": created, "errors": errors}),
                    error=ServiceError(
                        code="BATCH_FAILED",
                        message=f"Item {index} failed: {result.error.message}",
                        detail={"index": index, "code": result.error.code},
                    ),
                )

        data = dump_validated(BatchResultData, {"created": created, "errors": errors})
        if errors:
            return ServiceResult(
                ok=False,
                op=op,
                data=data,
                error=ServiceError(
                    code="BATCH_PARTIAL",
                    message=f"{len(errors)} of {len(items)} items failed",
                ),
            )
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @traced
    def list(self) -> ServiceResult:
        """All POS in creation order."""
        op = "list_pos"
        try:
            records = self._repository.find_all()
        except PosError as exc:
            return self._failure(op, exc)
        items = [_item(pos) for pos in records]
        data = dump_validated(PosListResultData, {"count": len(items), "items": items})
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    def get_by_name(self, name: str) -> ServiceResult:
        """Look up one POS by name."""
        op = "get_pos"
        try:
            pos = self._repository.find_by_name(name)
        except PosError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=_item(pos))

    @traced
    def get(self, pos_id: int) -> ServiceResult:
        """Look up one POS by id."""
        op = "get_pos"
        try:
            pos = self._repository.find_by_id(pos_id)
        except PosError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=_item(pos))


def _item(pos: PointOfSale) -> dict[str, Any]:
    return dump_validated(PosItem, pos.model_dump(mode="json"))
