from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Identity record. Display details live on Profile."""
    email = models.EmailField(unique=True)

    class Meta:
        db_table = 'users'

    def __str__(self):
        return self.username


class Profile(models.Model):
    """Customer / driver profile created at registration"""
    USER_TYPE_CHOICES = [
        ('customer', 'Customer'),
        ('rider', 'Driver'),
    ]

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    full_name = models.CharField(max_length=150, blank=True, default='')
    phone = models.CharField(max_length=20, blank=True, default='')
    user_type = models.CharField(max_length=10, choices=USER_TYPE_CHOICES, default='customer')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'

    def __str__(self):
        return f"{self.full_name or self.user.username} ({self.get_user_type_display()})"

    @property
    def is_driver(self):
        return self.user_type == 'rider'
