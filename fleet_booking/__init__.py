import logging
import os

from flask import Flask

from .controllers.booking import bp as booking_bp
from .models.store import Store
from .utils.constants import DEFAULT_TIMEZONE, DEFAULT_WEEK_START


def create_app(config: dict | None = None):
    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "dev-secret-change-me")
    app.config["BOOKING_DATA_PATH"] = os.getenv("BOOKING_DATA_PATH")
    app.config["BOOKING_TIMEZONE"] = os.getenv("BOOKING_TIMEZONE", DEFAULT_TIMEZONE)
    app.config["BOOKING_WEEK_START"] = int(os.getenv("BOOKING_WEEK_START", DEFAULT_WEEK_START))
    if config:
        app.config.update(config)

    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    if config and config.get("BOOKING_DATA_PATH"):
        Store.reset_instance()
    Store.instance(app.config["BOOKING_DATA_PATH"])  # load data.pkl or start empty
    app.register_blueprint(booking_bp)

    return app
