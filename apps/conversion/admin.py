"""
Admin interface for cached conversions.
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from .cache import ConversionCache
from .models import CachedConversion


@admin.register(CachedConversion)
class CachedConversionAdmin(admin.ModelAdmin):
    """
    Cached conversions are read-only; they can only be cleared.
    """

    list_display = [
        'key',
        'expiry_badge',
        'expires_at',
        'created_at',
    ]

    search_fields = ['key']

    readonly_fields = ['key', 'content', 'expires_at', 'created_at', 'updated_at']

    actions = ['clear_all_conversions', 'purge_expired_conversions']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_clear_permission(self, request):
        return request.user.has_perm('conversion.clear_conversion_cache')

    def expiry_badge(self, obj):
        if obj.is_expired:
            return format_html('<span style="color: {};">{}</span>', '#dc3545', 'Expired')
        return format_html('<span style="color: {};">{}</span>', '#28a745', 'Live')
    expiry_badge.short_description = 'Status'

    @admin.action(description='Clear ALL cached AP conversions', permissions=['clear'])
    def clear_all_conversions(self, request, queryset):
        deleted = ConversionCache().clear()
        self.message_user(request, f"Cache cleared ({deleted} entries).", messages.SUCCESS)

    @admin.action(description='Purge expired conversions', permissions=['clear'])
    def purge_expired_conversions(self, request, queryset):
        deleted = ConversionCache().purge_expired()
        self.message_user(request, f"Purged {deleted} expired entries.", messages.SUCCESS)
