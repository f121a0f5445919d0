from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AccessAuditRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("impersonation.start", "Impersonation started"),
                            ("impersonation.exit", "Impersonation ended"),
                            ("admin_console.denied", "Admin console denied"),
                        ],
                        max_length=64,
                    ),
                ),
                ("actor_id", models.CharField(blank=True, max_length=255, null=True)),
                ("target_tenant_id", models.CharField(blank=True, max_length=255, null=True)),
                ("path", models.CharField(max_length=512)),
                (
                    "outcome",
                    models.CharField(
                        choices=[
                            ("GRANTED", "Granted"),
                            ("DENIED", "Denied"),
                            ("ENDED", "Ended"),
                        ],
                        max_length=16,
                    ),
                ),
                ("occurred_at", models.DateTimeField()),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("recorded_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "velo_access_audit",
                "ordering": ["occurred_at", "id"],
                "indexes": [
                    models.Index(fields=["actor_id", "occurred_at"], name="idx_audit_actor_time"),
                    models.Index(fields=["target_tenant_id", "occurred_at"], name="idx_audit_tenant_time"),
                ],
            },
        ),
    ]
