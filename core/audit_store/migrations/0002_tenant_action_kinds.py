from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("core_audit_store", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="accessauditrecord",
            name="kind",
            field=models.CharField(
                choices=[
                    ("impersonation.start", "Impersonation started"),
                    ("impersonation.exit", "Impersonation ended"),
                    ("admin_console.denied", "Admin console denied"),
                    ("tenant.activate", "Tenant activated"),
                    ("tenant.suspend", "Tenant suspended"),
                    ("tenant.unsuspend", "Tenant unsuspended"),
                    ("tenant.expire", "Tenant expired"),
                    ("tenant.start_trial", "Tenant trial started"),
                ],
                max_length=64,
            ),
        ),
        migrations.AlterField(
            model_name="accessauditrecord",
            name="outcome",
            field=models.CharField(
                choices=[
                    ("GRANTED", "Granted"),
                    ("DENIED", "Denied"),
                    ("ENDED", "Ended"),
                    ("APPLIED", "Applied"),
                ],
                max_length=16,
            ),
        ),
    ]
