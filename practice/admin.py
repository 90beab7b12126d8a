"""
Django admin registrations for the practice models.

Registering the models here lets staff inspect and correct data via
the ``/admin/`` URL during development.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Appointment, AuditEvent, InventoryItem, MedicalRecord, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('email', 'name', 'role', 'is_staff', 'is_active')
    list_filter = ('role', 'is_staff', 'is_active')
    search_fields = ('email', 'name', 'username')
    ordering = ('email',)
    fieldsets = BaseUserAdmin.fieldsets + (('Clinic', {'fields': ('name', 'role')}),)


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'date', 'time', 'client_name', 'service', 'email', 'id_number')
    list_filter = ('date', 'service')
    search_fields = ('client_name', 'email', 'id_number')


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'dosage', 'unit', 'quantity', 'price', 'updated_at')
    search_fields = ('name',)
    readonly_fields = ('created_at', 'updated_at')


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient_name', 'diagnosis', 'id_number', 'email', 'created_at')
    search_fields = ('patient_name', 'id_number', 'email', 'diagnosis')
    readonly_fields = ('prescribed_medicines', 'created_at', 'updated_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
