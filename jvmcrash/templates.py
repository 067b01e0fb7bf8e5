#!python3
"""
Template engine for jvmcrash.

This module contains:
- TemplateEngine: Jinja2 template rendering for output generation
"""

import logging
from typing import Any, Optional

import orjson as json
from jinja2 import Environment, TemplateError

from .config import TemplateConfig


def _tojson(value: Any, indent: bool = False) -> str:
    """Jinja2 filter: serialize a value with orjson."""
    option = json.OPT_INDENT_2 if indent else 0
    return json.dumps(value, option=option | json.OPT_NON_STR_KEYS, default=str).decode("utf-8")


def create_environment() -> Environment:
    """Jinja2 environment with the jvmcrash filters registered."""
    environment = Environment(keep_trailing_newline=True)
    environment.filters["tojson"] = _tojson
    return environment


class TemplateEngine:
    """Engine for generating output from Jinja2 templates."""

    def __init__(
        self,
        template_config: Optional[TemplateConfig] = None,
        *,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize TemplateEngine.

        Args:
            template_config: Template configuration (uses defaults if None)
            logger: Logger instance (creates default if None)
        """
        cfg = template_config or TemplateConfig()

        self.logger = logger or logging.getLogger(__name__)
        self.template = cfg.template
        self.template_output = cfg.template_output
        self.environment = create_environment()

    def render(self, template_text: str, data) -> str:
        """Render template source with ``data`` (a list of document dictionaries)."""
        return self.environment.from_string(template_text).render(data=data)

    def generate_from_template(self, template_file, output_filename, data) -> bool:
        """
        Use Jinja2 to output data in a specific format.

        Returns:
            True when the output file was written
        """
        try:
            with open(template_file, 'r', encoding='utf-8') as tmpl:
                rendered = self.render(tmpl.read(), data)

            with open(output_filename, 'w', encoding='utf-8') as tpl:
                tpl.write(rendered)
        except (OSError, TemplateError) as e:
            self.logger.error("[red]   [-] Template error, activate debug mode to check for errors[/]")
            self.logger.debug(f"   [-] {e}")
            return False
        return True

    def run(self, data):
        """Run template generation for all configured templates."""
        for template_spec, output_spec in zip(self.template, self.template_output):
            self.logger.info(f'[+] Applying template "{template_spec[0]}", outputting to : {output_spec[0]}')
            self.generate_from_template(template_spec[0], output_spec[0], data)
