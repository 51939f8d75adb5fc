"""
Admin interface for Article management.
"""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from .models import Article


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    """
    Admin interface for Article model.
    """

    list_display = [
        'id',
        'title_short',
        'word_count',
        'page_link',
        'created_at',
    ]

    search_fields = [
        'title',
        'body',
    ]

    readonly_fields = [
        'id',
        'created_at',
        'updated_at',
        'word_count',
    ]

    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': (
                'id',
                'title',
            )
        }),
        ('Content', {
            'fields': (
                'body',
                'word_count',
            ),
        }),
        ('Timestamps', {
            'fields': (
                'created_at',
                'updated_at',
            ),
            'classes': ('collapse',),
        }),
    )

    def title_short(self, obj):
        return obj.title[:60] + '...' if len(obj.title) > 60 else obj.title
    title_short.short_description = 'Title'

    def page_link(self, obj):
        url = reverse('articles:article-detail', args=[obj.pk])
        return format_html('<a href="{}" target="_blank">View</a>', url)
    page_link.short_description = 'Page'
