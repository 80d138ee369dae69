from __future__ import annotations

from typing import Any

from flask import jsonify, request

from ..auth.principal import Principal
from ..core.exceptions import ValidationError
from .serialization import to_json


def current_principal() -> Principal:
    return Principal.from_headers(request.headers)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_field(data: dict, name: str) -> Any:
    if name not in data or data[name] is None:
        raise ValidationError(f"Missing field: {name}")
    return data[name]


def respond(payload: Any, status: int = 200):
    return jsonify(to_json(payload)), status
