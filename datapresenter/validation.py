"""
Request payload and query-string parsing.

Every helper either returns a clean Python value or raises
:class:`~datapresenter.errors.ValidationError`, which the app turns into a
400 response with the message attached.
"""

import math
import re
from datetime import datetime, timezone

from flask import request

from .errors import ValidationError

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_LIMIT = 10000
MAX_ID = 2**31 - 1


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def string_field(data, key, required=True, min_length=0, max_length=None, label=None,
                 strip=True):
    label = label or key
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{label} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    if strip:
        value = value.strip()
    if len(value) < min_length:
        raise ValidationError(f"{label} must be at least {min_length} characters")
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters")
    return value


def number_field(data, key, required=True, label=None):
    label = label or key
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f"{label} is required")
        return None
    # bool is an int subclass; true/false are never measurement values
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} must be a number")
    try:
        value = float(value)
    except OverflowError:
        raise ValidationError(f"{label} is too large")
    # json accepts NaN and Infinity, neither can be stored or serialized back
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number")
    return value


def int_field(data, key, label=None):
    label = label or key
    value = data.get(key)
    if value is None:
        raise ValidationError(f"{label} is required")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{label} must be greater than 0")
    if value > MAX_ID:
        raise ValidationError(f"{label} is too large")
    return value


def bool_field(data, key, default=True):
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


def color_field(data, key="color", default="#f8b4aa"):
    value = data.get(key)
    if value is None or value == "":
        return default
    if not isinstance(value, str) or not HEX_COLOR.match(value):
        raise ValidationError("Color must be in hex format (#RRGGBB)")
    return value


def email_field(data, key="email"):
    value = string_field(data, key, max_length=100)
    if not EMAIL.match(value):
        raise ValidationError(f"{key} is not a valid email address")
    return value


def parse_timestamp(value, label="timestamp"):
    """Parse an ISO 8601 string into naive UTC; a missing offset means UTC."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must be an ISO 8601 date-time")
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError(f"{label} must be an ISO 8601 date-time")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def timestamp_field(data, key="timestamp", required=True):
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError("Date and time are required")
        return None
    return parse_timestamp(value, key)


def credentials_payload(data):
    """Username, email and password for a new account."""
    return (
        string_field(data, "username", min_length=3, max_length=100),
        email_field(data),
        string_field(data, "password", min_length=12, max_length=100, strip=False),
    )


def series_payload(data):
    min_value = number_field(data, "minValue")
    max_value = number_field(data, "maxValue")
    if min_value >= max_value:
        raise ValidationError("MinValue must be less than MaxValue")
    return {
        "name": string_field(data, "name", min_length=3, max_length=200),
        "description": string_field(data, "description", required=False, max_length=500),
        "min_value": min_value,
        "max_value": max_value,
        "unit": string_field(data, "unit", max_length=50),
        "color": color_field(data),
        "icon": string_field(data, "icon", required=False, max_length=50),
    }


def measurement_query(args):
    """Parse the filters accepted by the measurement list and stats endpoints."""
    query = {"start": None, "end": None, "series_ids": None, "limit": None,
             "descending": False}

    if args.get("startDate"):
        query["start"] = parse_timestamp(args["startDate"], "startDate")
    if args.get("endDate"):
        query["end"] = parse_timestamp(args["endDate"], "endDate")

    raw_ids = args.get("seriesIds")
    if raw_ids:
        try:
            query["series_ids"] = [int(part) for part in raw_ids.split(",") if part.strip()]
        except ValueError:
            raise ValidationError("seriesIds must be a comma-separated list of integers")
        if any(not 0 < sid <= MAX_ID for sid in query["series_ids"]):
            raise ValidationError("seriesIds must be positive integers")

    raw_limit = args.get("limit")
    if raw_limit:
        try:
            limit = int(raw_limit)
        except ValueError:
            raise ValidationError("limit must be an integer")
        if limit > 0:
            query["limit"] = min(limit, MAX_LIMIT)

    sort_order = args.get("sortOrder", "asc").lower()
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sortOrder must be 'asc' or 'desc'")
    query["descending"] = sort_order == "desc"

    return query
