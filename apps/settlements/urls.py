from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'settlements'

router = DefaultRouter()
router.register(r'', views.SettlementViewSet, basename='settlement')

urlpatterns = [
    # GET    /api/settlements/?event=<id>[&mine=true]   - List settlements
    # POST   /api/settlements/                          - Custom settlement
    # GET    /api/settlements/{id}/                     - Settlement details
    # POST   /api/settlements/{id}/complete/            - Mark completed

    # Per-event endpoints
    path('events/<uuid:event_id>/balances/', views.event_balances, name='event-balances'),
    path('events/<uuid:event_id>/summary/', views.event_summary, name='event-summary'),
    path('events/<uuid:event_id>/generate/', views.generate_event_settlements, name='event-generate'),

    path('', include(router.urls)),
]
