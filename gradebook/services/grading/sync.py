from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable

from gradebook.services.grading.buffer import PendingEditBuffer
from gradebook.services.shared.dto import CommitResult, EnrollmentUpdate
from gradebook.services.shared.errors import (
    ActivityClosedError,
    ExternalDependencyError,
    ServiceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PersistFn = Callable[[EnrollmentUpdate], Awaitable[Any]]


class SyncCoordinator:
    """Commits the dirty part of a :class:`PendingEditBuffer`.

    One awaited persistence call per dirty enrollment, in sequence. Each call
    reads the pending value at the moment it is issued, so an edit made while
    an earlier enrollment is being written is not lost. Failed enrollments
    stay in the buffer; committing again retries them.
    """

    def __init__(self, buffer: PendingEditBuffer, persist: PersistFn):
        self.buffer = buffer
        self.persist = persist

    async def commit(self, module_id: str | None = None) -> CommitResult:
        activity = self.buffer.activity
        if activity.is_closed:
            raise ActivityClosedError(f"Activity {activity.activity_id} is closed")
        if module_id is not None:
            if not activity.is_modular:
                raise ValidationError("Module-scoped commit needs a modular program")
            if module_id not in activity.schema.module_ids():
                raise ValidationError(f"Unknown module {module_id!r}")

        t0 = time.time()
        result = CommitResult(scope=module_id)
        for eid in self.buffer.dirty_enrollments(module_id):
            if not self.buffer.is_dirty(eid, module_id):
                continue
            update = self.buffer.build_update(eid, module_id)
            try:
                await self.persist(update)
            except Exception as exc:
                logger.warning(
                    "grading_commit_failed activity=%s enrollment=%s module=%s err=%s",
                    activity.activity_id,
                    eid,
                    module_id or "-",
                    exc,
                )
                result.failed[eid] = exc if isinstance(exc, ServiceError) else ExternalDependencyError(str(exc))
                continue
            self.buffer.acknowledge(update)
            result.committed.append(eid)
            logger.debug("grading_commit_ok enrollment=%s state=%s", eid, update["state"])

        logger.info(
            "grading_commit activity=%s module=%s committed=%s failed=%s ms=%s",
            activity.activity_id,
            module_id or "-",
            len(result.committed),
            len(result.failed),
            int((time.time() - t0) * 1000),
        )
        return result
