"""
Boards app admin
"""
from __future__ import annotations

from django.contrib import admin

from .models import Board, Link, LinkTag


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """
    Admin definition for Board model
    """
    list_display = ["slug_path", "title", "created"]
    search_fields = ["slug_path", "title"]
    readonly_fields = ["uuid", "slug_path", "created"]


class LinkTagInline(admin.TabularInline):
    """
    Read-only list of a link's tag paths and positions.
    """
    model = LinkTag
    fields = ["tag_path", "position"]
    readonly_fields = ["tag_path", "position"]
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        """
        Positions must stay contiguous, so memberships are only edited through the API.
        """
        return False


@admin.register(Link)
class LinkAdmin(admin.ModelAdmin):
    """
    Admin definition for Link model
    """
    inlines = [LinkTagInline]
    list_display = ["__str__", "board", "title", "soft_deleted", "created"]
    list_filter = ["soft_deleted"]
    search_fields = ["url", "title"]
    readonly_fields = ["board", "client_id", "created"]

    def has_add_permission(self, request):
        """
        Don't create Links using the django admin. Use the API or UI.
        """
        return False


@admin.register(LinkTag)
class LinkTagAdmin(admin.ModelAdmin):
    """
    Admin definition for LinkTag model
    """
    list_display = ["link", "tag_path", "position"]
    list_filter = ["board"]
    search_fields = ["tag_path"]
    readonly_fields = ["link", "board", "tag_path", "position"]

    def has_add_permission(self, request):
        """
        Don't create LinkTags using the django admin. Use the API or UI.
        """
        return False
