# em_core/iam/models.py
from __future__ import annotations

from datetime import date

from django.db import models

from em_core.common.models import TimeStampedModel


class Permission(TimeStampedModel):
    """
    Opaque grant string, conventionally `resource.action`.
    Only uniqueness is enforced.
    """
    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=100, blank=True, default="")

    class Meta:
        db_table = "permissions"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class Role(TimeStampedModel):
    name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    permissions = models.ManyToManyField(
        Permission,
        through="RolePermission",
        related_name="roles",
        blank=True,
    )

    class Meta:
        db_table = "roles"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.name


class RolePermission(models.Model):
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="role_permissions")
    permission = models.ForeignKey(Permission, on_delete=models.CASCADE, related_name="role_permissions")

    class Meta:
        db_table = "role_permissions"
        constraints = [
            models.UniqueConstraint(fields=["role", "permission"], name="uq_role_permission"),
        ]

    def __str__(self) -> str:
        return f"{self.role_id}:{self.permission_id}"


class User(TimeStampedModel):
    """
    Application user. Not Django's auth user: authentication goes through
    BearerTokenAuthentication, which loads this model by username.
    """
    username = models.CharField(max_length=50, unique=True)
    email = models.EmailField(max_length=254, unique=True)
    password = models.CharField(max_length=255)  # hash, never plaintext
    full_name = models.CharField(max_length=100)
    phone_number = models.CharField(max_length=20, blank=True, null=True)
    date_of_birth = models.DateField(blank=True, null=True)
    active = models.BooleanField(default=True)

    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name="users")

    class Meta:
        db_table = "users"
        ordering = ["id"]

    def __str__(self) -> str:
        return self.username

    # DRF's IsAuthenticated / request.user contract
    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    @property
    def permission_names(self) -> frozenset[str]:
        cached = getattr(self, "_permission_names", None)
        if cached is None:
            cached = frozenset(p.name for p in self.role.permissions.all())
            self._permission_names = cached
        return cached

    def age(self, today: date | None = None) -> int | None:
        if self.date_of_birth is None:
            return None
        today = today or date.today()
        dob = self.date_of_birth
        return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))
