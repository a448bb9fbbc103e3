"""Prompt template manager.

Loads and renders prompts from YAML files with Mako templating.
Each template can specify its own LLM settings (model, max_tokens, temperature).
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from mako.exceptions import MakoException
from mako.template import Template
from pydantic import BaseModel, ConfigDict

from app.core.exceptions import ConfigNotFoundError, ConfigValidationError
from app.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPT_MODEL = "gemini/gemini-2.5-flash"


class PromptType(str, Enum):
    """Available prompt types."""

    LESSON_GENERATION = "lesson_generation"
    LESSON_TRANSLATION = "lesson_translation"


class LLMSettings(BaseModel):
    """LLM settings for a prompt template.

    Specified in each prompt YAML file; determine which model and
    parameters to use for that task.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str = DEFAULT_PROMPT_MODEL
    max_tokens: int = 2000
    temperature: float = 0.7


class PromptTemplate(BaseModel):
    """Prompt template metadata with LLM settings."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    description: str
    template: str
    llm_settings: LLMSettings = LLMSettings()
    example_variables: dict[str, Any] = {}


class PromptManager:
    """Manages prompt templates with Mako rendering.

    Usage:
        >>> manager = PromptManager()
        >>> prompt = manager.render(
        ...     PromptType.LESSON_TRANSLATION,
        ...     language_name="French",
        ...     title="World Food Day",
        ...     lines=["October 16 is World Food Day."],
        ... )
    """

    def __init__(self, prompts_dir: Path | None = None) -> None:
        """Initialize prompt manager.

        Args:
            prompts_dir: Directory containing prompt YAML files
                        (defaults to app/prompts/templates/)
        """
        if prompts_dir is None:
            prompts_dir = Path(__file__).parent / "templates"

        self.prompts_dir = prompts_dir
        self._cache: dict[PromptType, PromptTemplate] = {}

        logger.info("PromptManager initialized", prompts_dir=str(self.prompts_dir))

    def load(self, prompt_type: PromptType) -> PromptTemplate:
        """Load prompt template from YAML file.

        Args:
            prompt_type: Type of prompt to load

        Returns:
            PromptTemplate instance

        Raises:
            ConfigNotFoundError: If prompt file doesn't exist
            ConfigValidationError: If YAML is invalid or incomplete
        """
        if prompt_type in self._cache:
            return self._cache[prompt_type]

        yaml_file = self.prompts_dir / f"{prompt_type.value}.yaml"

        if not yaml_file.exists():
            raise ConfigNotFoundError(prompt_type.value, config_path=str(yaml_file))

        try:
            with open(yaml_file, encoding="utf-8") as f:
                data = yaml.safe_load(f)

            llm_settings = LLMSettings(
                model=data.get("model", DEFAULT_PROMPT_MODEL),
                max_tokens=data.get("max_tokens", 2000),
                temperature=data.get("temperature", 0.7),
            )

            template = PromptTemplate(
                name=data["name"],
                version=str(data["version"]),
                description=data["description"],
                template=data["template"],
                llm_settings=llm_settings,
                example_variables=data.get("example_variables", {}),
            )
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Invalid YAML in {yaml_file}: {e}", config_path=str(yaml_file)
            ) from e
        except KeyError as e:
            raise ConfigValidationError(
                field=str(e.args[0]),
                reason="missing required field",
                config_path=str(yaml_file),
            ) from e

        self._cache[prompt_type] = template

        logger.debug(
            "Loaded prompt template",
            type=prompt_type.value,
            version=template.version,
            model=llm_settings.model,
        )
        return template

    def render(self, prompt_type: PromptType, **variables: Any) -> str:
        """Render prompt template with variables.

        Args:
            prompt_type: Type of prompt to render
            **variables: Variables to inject into template

        Returns:
            Rendered prompt string

        Raises:
            ConfigNotFoundError: If prompt template doesn't exist
            ConfigValidationError: If template rendering fails
        """
        template_obj = self.load(prompt_type)

        try:
            rendered = Template(template_obj.template).render(**variables)
        except (MakoException, NameError, TypeError) as e:
            raise ConfigValidationError(
                f"Failed to render {prompt_type.value} template: {e}",
                config_path=str(self.prompts_dir / f"{prompt_type.value}.yaml"),
            ) from e

        logger.debug(
            "Rendered prompt",
            type=prompt_type.value,
            variables=list(variables.keys()),
        )
        return str(rendered).strip()

    def get_llm_settings(self, prompt_type: PromptType) -> LLMSettings:
        """Get LLM settings for a prompt type.

        Args:
            prompt_type: Type of prompt

        Returns:
            LLMSettings with model, max_tokens, temperature
        """
        return self.load(prompt_type).llm_settings

    def clear_cache(self) -> None:
        """Clear template cache so templates are re-read from disk."""
        self._cache.clear()
        logger.debug("Cleared prompt cache")


__all__ = [
    "LLMSettings",
    "PromptManager",
    "PromptTemplate",
    "PromptType",
]
