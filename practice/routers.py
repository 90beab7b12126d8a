"""
URL mappings for the clinic backend API.

Paths mirror those used by the front-end ``services/api.js`` module.
Paths carry no trailing slash.
"""
from django.urls import path, include

from .auth_views import login_view, me_view, refresh_view, logout_view
from .views import health
from .views.appointments import appointments, available_slots, patient_appointments, appointment_detail
from .views.inventory import inventory_list, inventory_detail
from .views.records import records, search_records, record_detail


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('api/health', health.health, name='health'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/refresh', refresh_view, name='refresh_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    # Appointments
    path('api/appointments', appointments, name='appointments'),
    path('api/appointments/available-slots', available_slots, name='available_slots'),
    path('api/appointments/patient/<str:identifier>', patient_appointments, name='patient_appointments'),
    path('api/appointments/<int:pk>', appointment_detail, name='appointment_detail'),
    # Inventory
    path('api/inventory', inventory_list, name='inventory_list'),
    path('api/inventory/<int:pk>', inventory_detail, name='inventory_detail'),
    # Medical records
    path('api/medical-records', records, name='records'),
    path('api/medical-records/search/<str:name>', search_records, name='search_records'),
    path('api/medical-records/<int:pk>', record_detail, name='record_detail'),
]
