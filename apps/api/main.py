"""Thin API launcher.

This is the uvicorn entrypoint. All application logic lives in the chatjournal package.
Run with: uvicorn apps.api.main:app --reload

Note: The app instance is created here (not in chatjournal.app) to avoid import-time
side effects. This allows tests to import create_app without requiring all
environment variables to be configured.
"""

from chatjournal.app import create_configured_app

app = create_configured_app()

__all__ = ["app"]
