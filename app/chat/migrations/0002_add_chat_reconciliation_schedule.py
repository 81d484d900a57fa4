"""
Add Celery Beat schedule for request chat reconciliation.

Requests are created together with their chat, but rows written by other
paths (admin, data imports, restored backups) can miss one. This periodic
task creates the missing chats every hour.
"""

from django.db import migrations


def create_reconciliation_task(apps, schema_editor):
    """Create the request chat reconciliation periodic task."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    every_hour, _ = IntervalSchedule.objects.get_or_create(
        every=60,
        period="minutes",
    )

    PeriodicTask.objects.get_or_create(
        name="Chat: Reconcile Request Chats",
        defaults={
            "task": "chat.tasks.reconcile_request_chats",
            "interval": every_hour,
            "enabled": True,
            "description": (
                "Hourly sweep creating the chat of any transport request "
                "that does not have one yet."
            ),
        },
    )


def remove_reconciliation_task(apps, schema_editor):
    """Remove the reconciliation task on rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")
    PeriodicTask.objects.filter(name="Chat: Reconcile Request Chats").delete()


class Migration(migrations.Migration):
    dependencies = [
        ("chat", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_reconciliation_task, remove_reconciliation_task),
    ]
