"""
Database models for the VoCare backend.

The tables mirror the records the browser client reads and writes
(``appointments``, ``patients``, ``categories``, ``relatives``) so that
rows round-trip through :mod:`care.services.store` without renaming
fields.  Accounts, contact messages, news and the audit trail are
stored alongside.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


def new_appointment_id() -> str:
    return uuid.uuid4().hex


class User(AbstractUser):
    """Login account with the profile fields collected at registration."""
    SEX_CHOICES = [
        ('Herr', 'Herr'),
        ('Frau', 'Frau'),
        ('Divers', 'Divers'),
    ]
    sex = models.CharField(max_length=10, choices=SEX_CHOICES, blank=True)
    birth_date = models.DateField(null=True, blank=True)
    address = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return self.username


class Appointment(models.Model):
    """A scheduled, time-ranged event.

    ``start`` and ``end`` are stored as aware datetimes; the engine
    enforces ``start < end`` before a row is written.  ``patient`` and
    ``category`` are free-text tags that only drive filtering.
    """
    id = models.CharField(max_length=64, primary_key=True, default=new_appointment_id)
    title = models.CharField(max_length=255)
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField()
    location = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True, null=True)
    patient = models.CharField(max_length=255, blank=True, null=True)
    category = models.CharField(max_length=100, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['category', 'start'], name='care_appt_category_start_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.start:%F %H:%M})"


class Patient(models.Model):
    id = models.BigAutoField(primary_key=True)
    firstname = models.CharField(max_length=100)
    lastname = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    birth_date = models.DateField(null=True, blank=True)
    # Pflegegrad 1-5
    care_level = models.PositiveSmallIntegerField(default=1)
    pronoun = models.CharField(max_length=32, blank=True)
    active = models.BooleanField(default=True, db_index=True)
    active_since = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    photo_url = models.CharField(max_length=512, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self) -> str:
        return f"{self.firstname} {self.lastname}"


class Category(models.Model):
    """Appointment category shown on the categories page and in filters."""
    id = models.SlugField(max_length=64, primary_key=True)
    label = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    color = models.CharField(max_length=32, blank=True)
    icon = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['label']
        verbose_name_plural = 'categories'

    def __str__(self) -> str:
        return self.label


class Relative(models.Model):
    firstname = models.CharField(max_length=100)
    lastname = models.CharField(max_length=100)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['lastname', 'firstname']

    def __str__(self) -> str:
        return f"{self.firstname} {self.lastname}"


class ContactMessage(models.Model):
    """A message sent through the public contact form."""
    firstname = models.CharField(max_length=100)
    lastname = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.firstname} {self.lastname} <{self.email}>"


class NewsItem(models.Model):
    title = models.CharField(max_length=255)
    content = models.TextField()
    image = models.CharField(max_length=512, blank=True)
    published_at = models.DateTimeField(db_index=True)

    class Meta:
        ordering = ['-published_at']

    def __str__(self) -> str:
        return self.title


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='care_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='care_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
