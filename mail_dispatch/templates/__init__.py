"""Templates module for mail dispatch service.

Contains the Jinja2 renderer and the packaged email templates.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from mail_dispatch.templates.renderer import TemplateRenderer

__all__ = ["TemplateRenderer"]
