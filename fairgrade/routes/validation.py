"""
Request body parsing shared by the function blueprints.
"""
import pydantic
from flask import request

from fairgrade.errors import ValidationError


def json_body():
    """Return the request's JSON object or raise ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_model(model, data):
    """Validate ``data`` against a pydantic model, reporting the first problem."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise ValidationError(f"Invalid field '{field}': {first.get('msg')}")
