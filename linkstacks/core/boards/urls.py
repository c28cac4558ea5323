"""
Boards API URLs.
"""

from django.urls import include, path

from .rest_api import urls

app_name = "ls_boards"
urlpatterns = [path("", include(urls))]
