"""Pulls pieces together to serve flake IDs over Flask.

This module provides:
- create_app: a function to get a Flask considering a dev/prod environment
- Generator, FlakeID: the ID generator and its ID type, for library use
"""

import time

from flask import Flask, g, request

from .api.endpoints import register_endpoints
from .config import config
from .utils.codec import FlakeID
from .utils.ids import Generator
from .utils.json import FlakeJSONProvider
from .utils.logging import setup_logging
from .utils.network import worker_id_from_address


def create_app(config_name="development"):
    """Initializes a flake ID Flask app with its own Generator."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.json = FlakeJSONProvider(app)

    setup_logging(app)

    worker_id = app.config["WORKER_ID"]
    if worker_id is None:
        worker_id = worker_id_from_address()
        app.logger.warning("WORKER_ID is not set, derived %d from the host address", worker_id)
    generator = Generator(worker_id, app.config["EPOCH"])
    app.logger.info("Minting IDs as worker %d", generator.worker_id)

    register_endpoints(app, generator)

    @app.before_request
    def _start_timer():
        g.start_time = time.time()

    @app.after_request
    def _log_request(response):
        if app.config["LOG_REQUESTS"]:
            duration = (time.time() - g.start_time) * 1000
            log_message = (
                f"{request.remote_addr} - {request.method} {request.path} "
                f"HTTP/{request.environ.get('SERVER_PROTOCOL')} "
                f"{response.status_code} - {duration:.2f}ms"
            )
            app.logger.info(log_message)
        return response

    return app
