from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    display_name = models.CharField(max_length=120, blank=True)
    phone = models.CharField(max_length=30, blank=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def fill_display_name(self) -> bool:
        """Default a blank display name to the full name or email; True when changed."""
        if self.display_name:
            return False
        self.display_name = self.full_name or self.email
        return True
