"""Main entry point for the Marathon Slack bridge."""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from marathon_bridge.api import create_fastapi_app
from marathon_bridge.app import Application
from marathon_bridge.config import BridgeSettings
from marathon_bridge.logging_config import setup_logging


def main():
    """Run the bridge and its health endpoint."""
    project_root = Path(__file__).resolve().parent
    load_dotenv(project_root / ".env")

    setup_logging()
    settings = BridgeSettings.from_env()

    # uvicorn exits the process once lifespan shutdown has drained the bridge
    app = create_fastapi_app(Application(settings=settings, terminate=None))

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
