"""Guard against leaving an editing view with unsaved edits."""

from __future__ import annotations

import logging

from gradebook.services.grading.buffer import PendingEditBuffer
from gradebook.services.grading.sync import SyncCoordinator
from gradebook.services.shared.errors import ValidationError

logger = logging.getLogger(__name__)


class LeaveChoice:
    CONTINUE_EDITING = "continue"
    COMMIT_AND_LEAVE = "commit"
    DISCARD_AND_LEAVE = "discard"

    ALL = (CONTINUE_EDITING, COMMIT_AND_LEAVE, DISCARD_AND_LEAVE)


class UnsavedChangesGuard:
    def __init__(self, buffer: PendingEditBuffer, coordinator: SyncCoordinator):
        self.buffer = buffer
        self.coordinator = coordinator

    def should_intercept(self) -> bool:
        return not self.buffer.is_empty

    def options(self) -> tuple:
        return LeaveChoice.ALL if self.should_intercept() else ()

    async def resolve(self, choice: str) -> bool:
        """Apply the operator's choice; return True when navigation may proceed."""
        if not self.should_intercept():
            return True
        if choice not in LeaveChoice.ALL:
            raise ValidationError(f"Unknown leave choice: {choice!r}")
        if choice == LeaveChoice.CONTINUE_EDITING:
            return False
        if choice == LeaveChoice.DISCARD_AND_LEAVE:
            self.buffer.discard_all()
            return True

        result = await self.coordinator.commit()
        if not result.ok:
            logger.warning("grading_leave_blocked failed=%s", len(result.failed))
            return False
        return self.buffer.is_empty
