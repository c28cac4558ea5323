from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("boards/rest_api/", include("linkstacks.core.boards.urls")),
]
