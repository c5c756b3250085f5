"""Configuration module for mail dispatch service.

Loads and validates service settings from environment variables or .env file.

Author: Triptics
Created: 2025-11-04
Version: 1.0.0
"""

from mail_dispatch.config.settings import DispatchConfig

__all__ = ["DispatchConfig"]
