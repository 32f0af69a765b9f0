from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'events'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.EventViewSet, basename='event')

urlpatterns = [
    # Event ViewSet routes
    # GET    /api/events/                         - List user's events
    # POST   /api/events/                         - Create event
    # GET    /api/events/{id}/                    - Get event details
    # PATCH  /api/events/{id}/                    - Update settings (admins)
    # GET    /api/events/{id}/summary/            - Counts, totals, recent activity
    # POST   /api/events/join/                    - Join with event code
    # GET    /api/events/{id}/participants/       - List participants
    # GET    /api/events/{id}/contributions/      - List contributions
    # POST   /api/events/{id}/contributions/      - Add contribution

    path('', include(router.urls)),
]
