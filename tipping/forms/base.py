from flask import request
from werkzeug.datastructures import MultiDict

from tipping.errors import ValidationError, form_error_message


def json_formdata(payload):
    """
    Flatten a JSON object into form data WTForms can bind.

    None values are dropped so optional fields read as missing, and lists are
    spread into FieldList keys (``emails-0``, ``emails-1``, ...).
    """
    data = MultiDict()
    for key, value in (payload or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                if item is not None:
                    data.add(f"{key}-{index}", item)
        elif isinstance(value, bool):
            # BooleanField treats any non-empty string as true
            if value:
                data.add(key, "y")
        else:
            data.add(key, value)
    return data


def bind_json(form_class, payload=None):
    """Build and validate a form from the request body; raises ValidationError"""
    if payload is None:
        payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    form = form_class(formdata=json_formdata(payload), meta={"csrf": False})
    if not form.validate():
        raise ValidationError(form_error_message(form))
    return form
