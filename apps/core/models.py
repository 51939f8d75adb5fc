"""
Core models for the Format Converter project.
Base classes and the persisted converter settings.
"""

import uuid
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """
    Abstract base model with creation and update timestamps.
    """
    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        verbose_name='Created At',
        help_text='Timestamp when record was created'
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated At',
        help_text='Timestamp when record was last updated'
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']


class BaseModel(TimeStampedModel):
    """
    Abstract base model with a UUID primary key and timestamp tracking.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name='ID',
        help_text='Unique identifier (UUID)'
    )

    class Meta(TimeStampedModel.Meta):
        abstract = True

    def __str__(self):
        return f"{self.__class__.__name__} ({self.id})"


class ConverterSettings(BaseModel):
    """
    Persistent converter configuration edited from the admin.
    Singleton pattern - only one active settings record at a time.

    Blank fields fall back to the FORMAT_CONVERTER_* Django settings.
    """

    MODEL_CHOICES = [
        ('gpt-4o-mini', 'GPT-4o Mini (Recommended)'),
        ('gpt-4o', 'GPT-4o'),
    ]

    api_key = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='API Key',
        help_text='Text-generation API key (https://platform.openai.com/api-keys)'
    )

    model = models.CharField(
        max_length=100,
        choices=MODEL_CHOICES,
        blank=True,
        default='gpt-4o-mini',
        verbose_name='AI Model',
        help_text='Model used for AP style conversions'
    )

    is_active = models.BooleanField(
        default=True,
        verbose_name='Active',
        help_text='Whether these settings are currently in use'
    )

    class Meta:
        db_table = 'converter_settings'
        verbose_name = 'Converter Settings'
        verbose_name_plural = 'Converter Settings'
        ordering = ['-updated_at']

    def __str__(self):
        return f"Converter Settings (model: {self.model or 'default'})"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def get_active(cls):
        """Get the active settings instance, or None when nothing was saved yet."""
        return cls.objects.filter(is_active=True).first()

    def save(self, *args, **kwargs):
        """Ensure only one active settings record."""
        if self.is_active:
            ConverterSettings.objects.filter(is_active=True).exclude(pk=self.pk).update(is_active=False)
        super().save(*args, **kwargs)
