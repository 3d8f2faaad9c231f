from __future__ import annotations

from typing import List

from django.core.management.base import BaseCommand, CommandError

from gradebook.models import Activity
from gradebook.services.grading.service import recompute_activity
from gradebook.services.shared.errors import ActivityClosedError


class Command(BaseCommand):
    help = (
        "Recompute cached final grade, attendance percentage and state. "
        "Example: python manage.py recompute_progress --activity DIP-2024-ANUAL-V1"
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--activity",
            type=str,
            default="",
            help="Activity id(s) separated by commas",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Recompute every activity that is not closed",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report stale enrollments, do not write",
        )

    def handle(self, *args, **options):
        raw_ids: str = (options.get("activity") or "").strip()
        do_all: bool = bool(options["all"])
        dry_run: bool = bool(options.get("dry_run"))

        if not do_all and not raw_ids:
            raise CommandError("Choose one: --all or --activity ID[,ID...]")

        if do_all:
            activity_ids: List[str] = list(
                Activity.objects.filter(closed_at__isnull=True).order_by("id").values_list("id", flat=True)
            )
        else:
            activity_ids = [part.strip() for part in raw_ids.split(",") if part.strip()]
            known = set(Activity.objects.filter(id__in=activity_ids).values_list("id", flat=True))
            missing = [a for a in activity_ids if a not in known]
            if missing:
                raise CommandError(f"Activity not found: {', '.join(missing)}")

        total_stale = 0
        for activity_id in activity_ids:
            try:
                stale = recompute_activity(activity_id, dry_run=dry_run)
            except ActivityClosedError:
                self.stdout.write(self.style.WARNING(f"{activity_id}: closed, skipped"))
                continue
            total_stale += len(stale)
            self.stdout.write(f"{activity_id}: {len(stale)} stale enrollment(s)")

        verb = "would update" if dry_run else "updated"
        self.stdout.write(self.style.SUCCESS(f"Done: {verb} {total_stale} enrollment(s) in {len(activity_ids)} activity(ies)."))
