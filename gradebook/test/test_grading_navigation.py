from unittest.mock import AsyncMock

from django.test import SimpleTestCase

from gradebook.services.grading.buffer import PendingEditBuffer
from gradebook.services.grading.navigation import LeaveChoice, UnsavedChangesGuard
from gradebook.services.grading.sync import SyncCoordinator
from gradebook.services.shared.errors import ValidationError
from gradebook.test.utils.builders import course, record


class UnsavedChangesGuardTests(SimpleTestCase):
    def _guard(self, persist=None):
        buffer = PendingEditBuffer(course(evaluation_count=2), [record(1, [5.0])])
        coordinator = SyncCoordinator(buffer, persist or AsyncMock(return_value=None))
        return buffer, UnsavedChangesGuard(buffer, coordinator)

    async def test_clean_buffer_leaves_freely(self):
        _, guard = self._guard()
        self.assertFalse(guard.should_intercept())
        self.assertEqual(guard.options(), ())
        self.assertTrue(await guard.resolve(LeaveChoice.CONTINUE_EDITING))

    async def test_continue_editing_keeps_changes(self):
        buffer, guard = self._guard()
        buffer.set_grade(1, 1, "6")
        self.assertTrue(guard.should_intercept())
        self.assertEqual(guard.options(), LeaveChoice.ALL)
        self.assertFalse(await guard.resolve(LeaveChoice.CONTINUE_EDITING))
        self.assertTrue(buffer.is_dirty(1))

    async def test_discard_and_leave(self):
        buffer, guard = self._guard()
        buffer.set_grade(1, 1, "6")
        self.assertTrue(await guard.resolve(LeaveChoice.DISCARD_AND_LEAVE))
        self.assertTrue(buffer.is_empty)
        self.assertEqual(buffer.live_grades(1), [5.0, 0.0])

    async def test_commit_and_leave(self):
        persist = AsyncMock(return_value=None)
        buffer, guard = self._guard(persist)
        buffer.set_grade(1, 1, "6")
        self.assertTrue(await guard.resolve(LeaveChoice.COMMIT_AND_LEAVE))
        persist.assert_awaited_once()
        self.assertTrue(buffer.is_empty)

    async def test_failed_commit_blocks_navigation(self):
        buffer, guard = self._guard(AsyncMock(side_effect=RuntimeError("offline")))
        buffer.set_grade(1, 1, "6")
        with self.assertLogs("gradebook.services.grading", level="WARNING"):
            self.assertFalse(await guard.resolve(LeaveChoice.COMMIT_AND_LEAVE))
        self.assertTrue(buffer.is_dirty(1))

    async def test_unknown_choice(self):
        buffer, guard = self._guard()
        buffer.set_grade(1, 1, "6")
        with self.assertRaises(ValidationError):
            await guard.resolve("maybe")
