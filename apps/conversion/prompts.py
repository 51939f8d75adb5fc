"""
Prompt templates for AP style conversion.

Templates are versioned so a revised house style can be rolled out
without losing the previous wording.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PromptTemplate:
    """
    A versioned prompt template with metadata.
    """
    name: str
    template: str
    version: str = "1.0"
    description: str = ""
    expected_output_format: str = "html"
    tags: List[str] = field(default_factory=list)

    def render(self, **kwargs) -> str:
        """
        Render the template with provided variables.

        Substituted values are inserted verbatim; braces inside an article
        body are not interpreted.
        """
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            logger.error("Missing template variable %s for prompt '%s'", e, self.name)
            raise ValueError(f"Missing required variable: {e}")


class PromptRegistry:
    """
    Central registry for all prompt templates.
    """

    _instance = None
    _templates: Dict[str, Dict[str, PromptTemplate]] = {}  # {name: {version: template}}
    _active_versions: Dict[str, str] = {}  # {name: active_version}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._templates = {}
            cls._active_versions = {}
        return cls._instance

    def register(self, template: PromptTemplate, active: bool = True) -> None:
        if template.name not in self._templates:
            self._templates[template.name] = {}

        self._templates[template.name][template.version] = template

        if active or template.name not in self._active_versions:
            self._active_versions[template.name] = template.version

        logger.debug("Registered prompt '%s' v%s", template.name, template.version)

    def get(self, name: str, version: Optional[str] = None) -> Optional[PromptTemplate]:
        """
        Get a prompt template by name and optionally version.

        Returns None if not found.
        """
        if name not in self._templates:
            return None

        target_version = version or self._active_versions.get(name)
        return self._templates[name].get(target_version)


# Global registry instance
prompt_registry = PromptRegistry()


AP_STYLE_V1 = PromptTemplate(
    name="ap_style",
    version="1.0",
    description="Rewrite an article to Associated Press style for Digital Commerce 360 Pakistan",
    template=(
        "You are an expert AP style editor for Digital Commerce 360 Pakistan. "
        "Convert this article to Associated Press format with these requirements:\n"
        "\n"
        "STRUCTURE:\n"
        "- Lead paragraph: Maximum 35 words, answers who/what/when/where/why\n"
        "- Inverted pyramid structure\n"
        "- Short paragraphs (1-3 sentences)\n"
        "- Include dateline if location-specific: KARACHI, Pakistan - \n"
        "\n"
        "STYLE:\n"
        "- Third person voice only\n"
        "- Use 'said' for attribution\n"
        "- Numbers: Spell out one-nine, numerals for 10+\n"
        "- Dates: Month Day, Year format\n"
        "- Attribution required for all claims\n"
        "- No editorial language\n"
        "\n"
        "PAKISTAN E-COMMERCE FOCUS:\n"
        "- Currency: PKR format\n"
        "- Company names: Full legal names first reference\n"
        "- Government sources: Proper titles\n"
        "- Industry terminology: Clear definitions\n"
        "\n"
        "Original Article:\n"
        "Title: {title}\n"
        "Content: {content}\n"
        "\n"
        "Return ONLY the converted article content in proper HTML format with paragraphs."
    ),
    tags=["ap", "rewrite"],
)


def build_ap_prompt(title: str, content: str, version: Optional[str] = None) -> str:
    """Render the active AP style prompt for one article."""
    template = prompt_registry.get(AP_STYLE_V1.name, version)
    if template is None:
        raise ValueError(f"Unknown prompt version: {AP_STYLE_V1.name} v{version}")
    return template.render(title=title, content=content)


def register_default_prompts():
    """Register all default prompt templates."""
    defaults = [
        AP_STYLE_V1,
    ]

    for template in defaults:
        prompt_registry.register(template, active=(template.version == "1.0"))

    logger.info("Registered %d default prompt templates", len(defaults))


# Auto-register on import
register_default_prompts()
