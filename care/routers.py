"""
URL mappings for the VoCare API.

Paths follow the browser client's routes; trailing slashes are omitted
(``APPEND_SLASH = False``).
"""
from django.urls import path, include

from .auth_views import login_view, register_view, jwt_refresh_view, jwt_logout_view
from .views import health
from .views.appointments import appointments, appointments_day, appointments_navigate, appointments_week
from .views.categories import list_categories
from .views.contact import contact
from .views.news import list_news
from .views.patients import patients, update_patient
from .views.relatives import list_relatives


urlpatterns = [
    path('metrics', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/login', login_view, name='login_view'),
    path('api/register', register_view, name='register_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    # Calendar
    path('api/appointments', appointments, name='appointments'),
    path('api/appointments/week', appointments_week, name='appointments_week'),
    path('api/appointments/day', appointments_day, name='appointments_day'),
    path('api/appointments/navigate', appointments_navigate, name='appointments_navigate'),
    # Patients
    path('api/patients', patients, name='patients'),
    path('api/patients/<int:pk>', update_patient, name='patient_update'),
    # Lookups
    path('api/categories', list_categories, name='categories'),
    path('api/relatives', list_relatives, name='relatives'),
    # Public pages
    path('api/contact', contact, name='contact'),
    path('api/news', list_news, name='news'),
]
