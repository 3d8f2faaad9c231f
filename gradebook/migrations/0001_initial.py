from django.db import migrations, models
import django.db.models.deletion
import gradebook.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                (
                    "kind",
                    models.CharField(
                        choices=[("COURSE", "Course"), ("PROGRAM", "Modular program")],
                        default="COURSE",
                        max_length=16,
                    ),
                ),
                ("evaluation_count", models.PositiveSmallIntegerField(default=gradebook.models.default_evaluation_count)),
                ("session_count", models.PositiveSmallIntegerField(default=gradebook.models.default_session_count)),
                ("program_config", models.JSONField(blank=True, default=dict)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("verification_code", models.CharField(blank=True, default="", max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="InstitutionSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("min_passing_grade", models.FloatField(default=4.0)),
                ("min_attendance_percentage", models.FloatField(default=75.0)),
                ("grade_scale_max", models.FloatField(default=7.0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("participant_id", models.CharField(max_length=32)),
                ("grades", models.JSONField(blank=True, default=list)),
                ("attendance", models.JSONField(blank=True, default=dict)),
                (
                    "situation",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")],
                        default="ACTIVE",
                        max_length=16,
                    ),
                ),
                ("final_grade", models.FloatField(blank=True, null=True)),
                ("attendance_percentage", models.PositiveSmallIntegerField(default=0)),
                (
                    "state",
                    models.CharField(
                        choices=[
                            ("ENROLLED", "Enrolled"),
                            ("IN_PROGRESS", "In progress"),
                            ("APPROVED", "Approved"),
                            ("FAILED", "Failed"),
                        ],
                        default="ENROLLED",
                        max_length=16,
                    ),
                ),
                ("archived_grades", models.JSONField(blank=True, default=list)),
                ("observation", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "activity",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="gradebook.activity",
                    ),
                ),
            ],
            options={
                "ordering": ["participant_id"],
                "indexes": [models.Index(fields=["activity", "state"], name="gradebook_enr_act_state_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("participant_id", "activity"), name="uniq_enrollment_participant_activity"
                    )
                ],
            },
        ),
    ]
