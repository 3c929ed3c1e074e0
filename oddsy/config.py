"""
Process-wide configuration for Oddsy.

Loads `.env` and then the YAML/env configuration once at import time.
The resulting object is read-only for the rest of the process.
"""

from dotenv import load_dotenv

from .config_loader import load_app_config

load_dotenv()

config = load_app_config()
