"""Teaches Flask to render flake IDs as their text form.

This module provides:
- FlakeJSONProvider: a Flask JSON provider that serializes FlakeID as URL-safe base64
"""

from flask.json.provider import DefaultJSONProvider

from .codec import FlakeID, to_text


class FlakeJSONProvider(DefaultJSONProvider):
    """The default Flask JSON provider, plus FlakeID support."""

    @staticmethod
    def default(o):
        if isinstance(o, FlakeID):
            return to_text(o)
        return DefaultJSONProvider.default(o)
