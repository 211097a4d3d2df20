"""
Django admin registrations for the care models.

Staff can inspect and correct appointments, patients and lookup data
through ``/admin/``.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import (
    User,
    Appointment,
    Patient,
    Category,
    Relative,
    ContactMessage,
    NewsItem,
    AuditEvent,
)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'first_name', 'last_name', 'email', 'is_staff')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profil', {'fields': ('sex', 'birth_date', 'address')}),
    )


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('title', 'start', 'end', 'location', 'patient', 'category')
    list_filter = ('category',)
    search_fields = ('title', 'notes', 'patient')
    date_hierarchy = 'start'


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'firstname', 'lastname', 'care_level', 'active')
    list_filter = ('active', 'care_level')
    search_fields = ('firstname', 'lastname', 'email')


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'label', 'color', 'icon', 'updated_at')
    search_fields = ('label',)


@admin.register(Relative)
class RelativeAdmin(admin.ModelAdmin):
    list_display = ('firstname', 'lastname')
    search_fields = ('firstname', 'lastname')


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    list_display = ('email', 'firstname', 'lastname', 'created_at')
    search_fields = ('email', 'lastname')


@admin.register(NewsItem)
class NewsItemAdmin(admin.ModelAdmin):
    list_display = ('title', 'published_at')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__username')
