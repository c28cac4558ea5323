"""
boards Django application initialization.
"""

from django.apps import AppConfig


class BoardsConfig(AppConfig):
    """
    Configuration for the boards Django application.
    """

    name = "linkstacks.core.boards"
    verbose_name = "Link Boards"
    default_auto_field = "django.db.models.BigAutoField"
    label = "ls_boards"
