"""Main entry point for the chat exchange engine API."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from chat_engine.api import create_fastapi_app
from chat_engine.app import Application
from chat_engine.config import Settings
from chat_engine.logging_config import setup_logging


def main():
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    settings = Settings.from_env()
    setup_logging(debug=settings.debug)

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))

    app = create_fastapi_app(Application(settings))

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
