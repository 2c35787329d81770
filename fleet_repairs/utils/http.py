from flask import jsonify, request


def json_body_or_error():
    """
    Returns (body, None) for JSON object requests, or (None, error_response) otherwise.
    """
    if not request.is_json:
        return None, (jsonify({"error": "Expected application/json"}), 415)
    body = request.get_json(silent=True)
    if body is None:
        return {}, None
    if not isinstance(body, dict):
        return None, validation_error([detail("body", "Expected a JSON object")])
    return body, None


def validation_error(details, message="Validation error"):
    """details: list of {"field": ..., "message": ...}"""
    return jsonify({"error": message, "details": details}), 400


def detail(field, message):
    return {"field": field, "message": message}
