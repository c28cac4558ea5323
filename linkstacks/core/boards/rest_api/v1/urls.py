"""
Boards API v1 URLs.
"""

from django.urls.conf import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register("boards", views.BoardView, basename="board")
router.register("links", views.LinkView, basename="link")

urlpatterns = [
    path("", include(router.urls)),
]
