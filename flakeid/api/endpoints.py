"""The main endpoints file.

This module provides:
- API: a class of all endpoints
- register_endpoints: a function that registers endpoints onto an app and assigns a Generator
"""
import logging
from http import HTTPStatus

from flask import Blueprint, Response, abort, jsonify, request

from ..utils.codec import from_text
from ..utils.errors import MalformedInputError, TimestampOverflowError
from ..utils.ids import Generator


class API:
    """The dome API class to store endpoint methods + the Generator."""
    def __init__(self, generator: Generator, max_batch: int):
        """Populates variables that are used by endpoints.

        Args:
            generator (Generator): The Generator every endpoint mints from
            max_batch (int): The largest ``count`` accepted by ``/batch``
        """
        self.generator = generator
        self.max_batch = max_batch
        self.logger = logging.getLogger(__name__)

    def _mint(self):
        try:
            return self.generator.generate_id()
        except TimestampOverflowError as e:
            self.logger.error("Cannot mint IDs: %s", e)
            abort(HTTPStatus.SERVICE_UNAVAILABLE, description="Clock is out of the ID range")

    def next_id(self):
        """Mints a single ID and returns it as text and as an integer."""
        fid = self._mint()
        return jsonify({"id": fid, "value": int(fid)})

    def batch(self):
        """Mints ``count`` IDs (request arg) as a raw stream of 8-byte big-endian chunks."""
        count = request.args.get("count")
        if not count:
            abort(HTTPStatus.BAD_REQUEST, description="Count missing")
        try:
            count = int(count)
        except ValueError:
            abort(HTTPStatus.BAD_REQUEST, description="Count is not an integer")
        if not 1 <= count <= self.max_batch:
            abort(
                HTTPStatus.BAD_REQUEST,
                description=f"Count must be between 1 and {self.max_batch}",
            )
        try:
            payload = self.generator.generate_batch(count)
        except TimestampOverflowError as e:
            self.logger.error("Cannot mint IDs: %s", e)
            abort(HTTPStatus.SERVICE_UNAVAILABLE, description="Clock is out of the ID range")
        return Response(payload, 200, mimetype="application/octet-stream")

    def decode(self):
        """Splits an ID from the ``id`` request arg into its fields."""
        text = request.args.get("id")
        if not text:
            abort(HTTPStatus.BAD_REQUEST, description="ID missing")
        try:
            fid = from_text(text)
        except MalformedInputError:
            abort(HTTPStatus.BAD_REQUEST, description="ID is malformed")
        return jsonify(
            {
                "id": fid,
                "value": int(fid),
                "timestamp": fid.timestamp,
                "unix_ms": self.generator.unix_millis(fid),
                "worker_id": fid.worker_id,
                "sequence": fid.sequence,
            }
        )

    def info(self):
        """Tells which worker and epoch this instance mints with."""
        return jsonify(
            {"worker_id": self.generator.worker_id, "epoch": self.generator.epoch}
        )

    @staticmethod
    def hello():
        """A root plug to test connections and inform users."""
        return Response(
            """
        <h1>Hello!</h1>
        <p>GET /api/id for a fresh ID, /api/batch?count=N for many.</p>
        """,
            200,
        )



def register_endpoints(app, generator):
    """Binds endpoints to a Flask app.

    Args:
        app (Flask): The app to bind endpoints to
        generator (Generator): The Generator that will mint IDs
    """
    api = API(generator, app.config["MAX_BATCH"])
    api_bp = Blueprint("api", __name__)
    api_bp.add_url_rule("/id", view_func=api.next_id, methods=["GET"])
    api_bp.add_url_rule("/batch", view_func=api.batch, methods=["GET"])
    api_bp.add_url_rule("/decode", view_func=api.decode, methods=["GET"])
    api_bp.add_url_rule("/info", view_func=api.info, methods=["GET"])
    api_bp.add_url_rule("/", view_func=api.hello, methods=["GET"])
    app.register_blueprint(api_bp, url_prefix="/api")
