from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

router = DefaultRouter()
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    # GET    /api/expenses/?event=<id>          - List event expenses
    # POST   /api/expenses/                     - Submit expense
    # GET    /api/expenses/{id}/                - Expense with shares
    # PATCH  /api/expenses/{id}/                - Edit own pending expense
    # DELETE /api/expenses/{id}/                - Delete pending expense
    # POST   /api/expenses/{id}/review/         - Approve / reject
    # GET    /api/expenses/categories/          - Expense categories

    path('', include(router.urls)),
]
