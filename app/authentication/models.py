"""
Authentication models.

- User: Custom user model with email-based authentication

The marketplace has three kinds of accounts: drivers publish trips, shippers
send transport requests, admins use the back office. Display fields
(first_name, last_name, avatar) live on the user because chat fan-out
resolves them for every message.

Related files:
    - managers.py: Custom user manager for email-based creation
    - serializers.py: Public user summary used by chat and transport payloads
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.validators import RegexValidator
from django.db import models

from authentication.managers import UserManager


phone_validator = RegexValidator(
    regex=r"^[0-9+\-\s()]+$",
    message="Invalid phone number.",
)


class UserRole(models.TextChoices):
    """
    Marketplace role of an account.

    DRIVER: Publishes trips and receives transport requests
    SHIPPER: Sends transport requests against trips
    ADMIN: Back-office access
    """

    DRIVER = "driver", "Driver"
    SHIPPER = "shipper", "Shipper"
    ADMIN = "admin", "Admin"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        first_name / last_name: Display name shown in chat
        phone: Contact number shared with the counterpart of a request
        avatar: URL of the profile picture (optional)
        role: driver, shipper or admin
        is_active: Inactive users are refused at the websocket handshake
        is_staff: Whether the user can access Django admin
        date_joined / updated_at: Timestamps

    Usage:
        user = User.objects.create_user(
            email="driver@example.com",
            password="securepassword",
            first_name="Karim",
            last_name="Benali",
            role=UserRole.DRIVER,
        )
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )

    first_name = models.CharField(
        max_length=50,
        help_text="User's first name",
    )
    last_name = models.CharField(
        max_length=50,
        help_text="User's last name",
    )
    phone = models.CharField(
        max_length=30,
        blank=True,
        default="",
        validators=[phone_validator],
        help_text="Contact phone number",
    )
    avatar = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="URL of the user's avatar image",
    )
    role = models.CharField(
        max_length=10,
        choices=UserRole.choices,
        default=UserRole.SHIPPER,
        db_index=True,
        help_text="Marketplace role",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["first_name", "last_name"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return "First Last", falling back to the email address."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        return self.first_name or self.email.split("@")[0]

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER

    @property
    def is_shipper(self) -> bool:
        return self.role == UserRole.SHIPPER
