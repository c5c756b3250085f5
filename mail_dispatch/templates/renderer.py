"""Jinja2 template renderer for the mail dispatch service.

Renders the HTML and plain-text bodies of every template-backed email kind
(test, booking confirmation, payment receipt, transfer details, itinerary)
from ``<kind>.html`` / ``<kind>.txt`` files in the template directory.

Version: 1.0.0
"""

from __future__ import annotations

import html
import re
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    select_autoescape,
)

from mail_dispatch.core.exceptions import TemplateRenderError
from mail_dispatch.core.logger import get_logger
from mail_dispatch.models.email import EmailKind

logger = get_logger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent

_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


class TemplateRenderer:
    """Jinja2 template renderer for email templates.

    HTML templates are autoescaped; text templates are not. Templates use
    StrictUndefined, so a context missing a variable fails loudly instead of
    rendering an empty string. Placeholders for absent business fields are
    filled in before rendering.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        """Initialize template renderer.

        Args:
            template_dir: Path to templates directory (packaged templates if None).

        Raises:
            TemplateRenderError: If the template directory does not exist.
        """
        self.template_dir = Path(template_dir or DEFAULT_TEMPLATE_DIR)

        if not self.template_dir.is_dir():
            raise TemplateRenderError(
                f"Template directory not found: {self.template_dir}"
            )

        self.env = self._init_jinja_env()
        logger.info(f"Template renderer initialized: {self.template_dir}")

    def _init_jinja_env(self) -> Environment:
        """Initialize Jinja2 environment with custom settings."""
        return Environment(
            loader=FileSystemLoader(self.template_dir),
            autoescape=select_autoescape(
                enabled_extensions=("html",), default_for_string=True
            ),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def render_html(self, kind: EmailKind, context: dict[str, Any]) -> str:
        """Render HTML email template.

        Args:
            kind: Email kind determining which template to load.
            context: Dictionary with template variables.

        Returns:
            Rendered HTML string.

        Raises:
            TemplateRenderError: If template not found or rendering fails.
        """
        template_name = f"{kind.value}.html"

        try:
            logger.debug(f"Rendering HTML template: {template_name}")

            template = self.env.get_template(template_name)
            rendered = template.render(**context)

            logger.debug(f"HTML template rendered: {len(rendered)} bytes")
            return rendered

        except TemplateNotFound:
            logger.error(f"HTML template not found: {template_name}")
            raise TemplateRenderError(
                f"Template not found: {template_name}",
                template_name=template_name,
            ) from None

        except Exception as e:
            logger.error(f"Failed to render HTML template: {e}")
            raise TemplateRenderError(
                f"Failed to render {template_name}: {e}",
                template_name=template_name,
            ) from e

    def render_text(self, kind: EmailKind, context: dict[str, Any]) -> str:
        """Render plain-text email template.

        Attempts to load the .txt template. If not found, derives the text
        from the rendered HTML.

        Args:
            kind: Email kind determining which template to load.
            context: Dictionary with template variables.

        Returns:
            Rendered plain-text string.

        Raises:
            TemplateRenderError: If rendering fails.
        """
        template_name = f"{kind.value}.txt"

        try:
            logger.debug(f"Rendering text template: {template_name}")

            template = self.env.get_template(template_name)
            rendered = template.render(**context).strip()

            logger.debug(f"Text template rendered: {len(rendered)} bytes")
            return rendered

        except TemplateNotFound:
            logger.debug(f"Text template not found: {template_name}, using fallback")
            return self.html_to_text(self.render_html(kind, context))

        except Exception as e:
            logger.error(f"Failed to render text template: {e}")
            raise TemplateRenderError(
                f"Failed to render {template_name}: {e}",
                template_name=template_name,
            ) from e

    def render(self, kind: EmailKind, context: dict[str, Any]) -> tuple[str, str]:
        """Render both bodies.

        Returns:
            Tuple of (html, text).
        """
        return self.render_html(kind, context), self.render_text(kind, context)

    @staticmethod
    def html_to_text(markup: str) -> str:
        """Crude HTML-to-text conversion for kinds without a .txt template."""
        text = re.sub(r"(?i)<br\s*/?>|</p>|</h[1-6]>|</div>", "\n", markup)
        text = html.unescape(_TAG_RE.sub("", text))
        lines = (line.strip() for line in text.splitlines())
        return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()

    def template_exists(self, kind: EmailKind, format_type: str = "html") -> bool:
        """Check if template file exists for an email kind.

        Args:
            kind: Email kind to check.
            format_type: "html" or "text".

        Returns:
            True if template file exists, False otherwise.
        """
        ext = "html" if format_type == "html" else "txt"
        return (self.template_dir / f"{kind.value}.{ext}").exists()
