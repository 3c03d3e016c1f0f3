from django.urls import path

from core.common.views import health_check

urlpatterns = [
    path("", health_check, name="health-check"),
]
