"""
Database models for the clinic backend.

These models capture the three working areas of the clinic: the
appointment book, the medicine inventory and patients' medical
records, plus the staff/patient user accounts that gate access to
them.  Field names are snake_case here and exposed in camelCase by the
serializers to match the front-end contract.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user model with a clinic role.

    Users log in with their email address; ``username`` is kept for
    Django admin compatibility and defaults to the email.  ``name`` is
    embedded in issued tokens and used by the patient record matcher.
    """
    ROLE_NURSE = 'nurse'
    ROLE_DOCTOR = 'doctor'
    ROLE_ADMIN = 'admin'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_NURSE, 'Nurse'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_PATIENT, 'Patient'),
    ]
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)

    def save(self, *args, **kwargs):
        if not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.email

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Appointment(models.Model):
    """A booked visit.  ``date``/``time`` hold the slot start."""
    date = models.DateField(db_index=True)
    time = models.TimeField()
    client_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True, db_index=True)
    id_number = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    service = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-date', '-time']

    def __str__(self) -> str:
        return f"{self.client_name} @ {self.date:%Y-%m-%d} {self.time:%H:%M}"


class InventoryItem(models.Model):
    """A stocked medicine.

    ``quantity`` changes only through the prescription reconciler or
    validated direct edits, and both refuse negative results.
    """
    name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=64, blank=True, default='')
    unit = models.CharField(max_length=16, blank=True, default='mg')
    quantity = models.IntegerField(default=0)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ['name']

    def __str__(self) -> str:
        label = f"{self.name} {self.dosage}{self.unit}" if self.dosage else self.name
        return f"{label} x{self.quantity}"


class MedicalRecord(models.Model):
    """A consultation record for one patient visit.

    ``prescribed_medicines`` stores an ordered list of snapshots, each a
    dict ``{"id", "name", "dosage", "unit", "quantity"}`` where ``id`` is
    the :class:`InventoryItem` primary key at prescription time.
    """
    appointment = models.OneToOneField(
        Appointment, null=True, blank=True, on_delete=models.SET_NULL, related_name='medical_record'
    )
    patient_name = models.CharField(max_length=255, db_index=True)
    email = models.EmailField(blank=True, null=True, db_index=True)
    id_number = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=16, blank=True, null=True)
    symptoms = models.TextField()
    diagnosis = models.TextField()
    treatment = models.TextField()
    medications = models.TextField(blank=True, default='')
    prescribed_medicines = models.JSONField(default=list, blank=True)
    allergies = models.TextField(blank=True, default='')
    blood_pressure = models.CharField(max_length=32, blank=True, null=True)
    heart_rate = models.CharField(max_length=32, blank=True, null=True)
    temperature = models.CharField(max_length=32, blank=True, null=True)
    notes = models.TextField(blank=True, default='')
    follow_up_date = models.DateField(null=True, blank=True)
    lab_results = models.TextField(blank=True, default='')
    xray_notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return f"{self.patient_name}: {self.diagnosis[:30]}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='practice_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='practice_audit_object_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.object_type}#{self.object_id}"
