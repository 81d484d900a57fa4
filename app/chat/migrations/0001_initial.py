import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("transport", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Chat",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "last_activity_at",
                    models.DateTimeField(
                        db_index=True,
                        default=django.utils.timezone.now,
                        help_text="Timestamp of the most recent message or channel event",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Inactive chats stay readable but refuse new messages",
                    ),
                ),
                (
                    "request",
                    models.OneToOneField(
                        help_text="Transport request this chat belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat",
                        to="transport.transportrequest",
                    ),
                ),
                (
                    "requester",
                    models.ForeignKey(
                        help_text="Shipper who sent the request",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="requester_chats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "driver",
                    models.ForeignKey(
                        help_text="Driver of the trip",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="driver_chats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_chat",
                "ordering": ["-last_activity_at"],
                "indexes": [
                    models.Index(
                        fields=["requester", "-last_activity_at"],
                        name="chat_requester_activity_idx",
                    ),
                    models.Index(
                        fields=["driver", "-last_activity_at"],
                        name="chat_driver_activity_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("requester", models.F("driver")), _negated=True),
                        name="chat_participants_distinct",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChatMessage",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "content",
                    models.TextField(help_text="Message text", max_length=1000),
                ),
                (
                    "timestamp",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        help_text="When the message was appended",
                    ),
                ),
                (
                    "read",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the recipient has read this message",
                    ),
                ),
                (
                    "chat",
                    models.ForeignKey(
                        help_text="Chat this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.chat",
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="Participant who sent this message",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="chat_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["id"],
                "indexes": [
                    models.Index(
                        fields=["chat", "read", "sender"],
                        name="chat_msg_unread_idx",
                    ),
                ],
            },
        ),
    ]
