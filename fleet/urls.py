# fleet/urls.py
from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import AssignmentViewSet, ClientAssignmentsView, DroneViewSet, PayloadViewSet

router = DefaultRouter()
router.register(r"drones", DroneViewSet, basename="drones")
router.register(r"payloads", PayloadViewSet, basename="payloads")
router.register(r"assignments", AssignmentViewSet, basename="assignments")

urlpatterns = [
    path("clients/<str:client_id>/assignments/", ClientAssignmentsView.as_view(), name="client-assignments"),
]
urlpatterns += router.urls
