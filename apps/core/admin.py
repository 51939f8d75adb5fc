"""
Admin interface for the converter settings.
"""

from django import forms
from django.contrib import admin
from .models import ConverterSettings


class ConverterSettingsForm(forms.ModelForm):
    api_key = forms.CharField(
        required=False,
        widget=forms.PasswordInput(render_value=True),
        help_text=ConverterSettings._meta.get_field('api_key').help_text,
    )

    class Meta:
        model = ConverterSettings
        fields = ['api_key', 'model', 'is_active']


@admin.register(ConverterSettings)
class ConverterSettingsAdmin(admin.ModelAdmin):
    """
    Admin interface for ConverterSettings.

    The key itself is never shown in list views.
    """

    form = ConverterSettingsForm

    list_display = [
        'model',
        'key_configured',
        'is_active',
        'updated_at',
    ]

    readonly_fields = ['id', 'created_at', 'updated_at']

    def key_configured(self, obj):
        return obj.has_api_key
    key_configured.boolean = True
    key_configured.short_description = 'API Key'
