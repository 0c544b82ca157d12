# files/urls.py
from django.urls import path

from .views import ClientFilesView, SignedUrlView

urlpatterns = [
    path("clients/<str:client_id>/files/", ClientFilesView.as_view(), name="client-files"),
    path("files/signed-url/", SignedUrlView.as_view(), name="file-signed-url"),
]
