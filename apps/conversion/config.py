"""
Converter configuration.

Resolved once per service construction from the admin-edited
ConverterSettings record and the FORMAT_CONVERTER_* Django settings,
then passed around as an immutable value.
"""

import logging
from dataclasses import dataclass, replace

from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gpt-4o-mini'
DEFAULT_API_URL = 'https://api.openai.com/v1/chat/completions'


@dataclass(frozen=True)
class ConverterConfig:
    """Credential, model and call limits for AP style conversion."""
    api_key: str = ''
    model: str = DEFAULT_MODEL
    api_url: str = DEFAULT_API_URL
    timeout: int = 60
    max_tokens: int = 4000
    temperature: float = 0.3
    cache_ttl: int = 24 * 60 * 60

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)

    def __repr__(self):
        # Never print the key itself.
        return (
            f"ConverterConfig(model={self.model!r}, api_url={self.api_url!r}, "
            f"has_credentials={self.has_credentials})"
        )

    @classmethod
    def from_settings(cls) -> 'ConverterConfig':
        """Build from Django settings only."""
        return cls(
            api_key=getattr(settings, 'FORMAT_CONVERTER_API_KEY', '') or '',
            model=getattr(settings, 'FORMAT_CONVERTER_MODEL', '') or DEFAULT_MODEL,
            api_url=getattr(settings, 'FORMAT_CONVERTER_API_URL', '') or DEFAULT_API_URL,
            timeout=getattr(settings, 'FORMAT_CONVERTER_TIMEOUT', 60),
            max_tokens=getattr(settings, 'FORMAT_CONVERTER_MAX_TOKENS', 4000),
            temperature=getattr(settings, 'FORMAT_CONVERTER_TEMPERATURE', 0.3),
            cache_ttl=getattr(settings, 'FORMAT_CONVERTER_CACHE_TTL', 24 * 60 * 60),
        )

    @classmethod
    def load(cls) -> 'ConverterConfig':
        """
        Build the effective configuration.

        Non-blank values on the active ConverterSettings record win over
        Django settings.
        """
        from apps.core.models import ConverterSettings

        config = cls.from_settings()
        stored = ConverterSettings.get_active()
        if stored is None:
            return config

        overrides = {}
        if stored.api_key:
            overrides['api_key'] = stored.api_key
        if stored.model:
            overrides['model'] = stored.model
        return replace(config, **overrides) if overrides else config
