from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .container import Container, build_container_from_settings
from .core.constants import DEFAULT_PAGE_SIZE
from .dashboard.controller import register as register_dashboard

LOG_FORMAT = "%(asctime)s %(levelname)s [smart-attend] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEFAULT_PAGE_SIZE"] = int(getattr(settings, "DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE))

    if app.config["DEBUG"]:
        firebase = getattr(settings, "FIREBASE_CONFIG", {})
        app.logger.info(
            "settings=%s project=%s credentials=%s",
            settings_module, firebase.get("project_id") or "default", firebase.get("credentials_path") or "ADC",
        )

    container = container or build_container_from_settings(settings)
    register_dashboard(app, container)

    return app


if __name__ == "__main__":
    create_app().run()
