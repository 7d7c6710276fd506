"""
Configuration resolution and resilient startup for the Lern API.

Usage:
    from lern_startup.config import ConfigResolver, load_configuration
    from lern_startup.startup import run_with_retry

    resolver = ConfigResolver(load_configuration())
    port = resolver.get_int("SmtpPort")          # SMTP_PORT overrides
    mime_types = resolver.get_list("GzipMimeTypes")

    run_with_retry(check_database, delay=5, max_attempts=5)
"""

__version__ = "1.0.0"
