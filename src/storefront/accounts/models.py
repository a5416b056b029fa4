from django.db import models


class Customer(models.Model):
    # Stored lower-cased; see accounts.services.normalize_email.
    email = models.EmailField(max_length=254, unique=True)
    password_hash = models.CharField(max_length=256)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=32, blank=True, default="")
    is_active = models.BooleanField(default=True)
    last_login = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.email
