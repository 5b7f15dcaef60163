from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from flask import request

from ..common.datetime_utils import as_date, parse_duration, parse_time_of_day
from ..core.exceptions import ValidationError


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def uploaded_file():
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded.")
    return upload.stream


def opt_int(data: Mapping[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{key}' must be an integer.")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"'{key}' must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"'{key}' must be an integer.")


def req_int(data: Mapping[str, Any], key: str) -> int:
    value = opt_int(data, key)
    if value is None:
        raise ValidationError(f"'{key}' is required.")
    return value


def opt_decimal(data: Mapping[str, Any], key: str) -> Optional[Decimal]:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"'{key}' must be a number.")
    if not number.is_finite():
        raise ValidationError(f"'{key}' must be a number.")
    return number


def opt_date(data: Mapping[str, Any], key: str) -> Optional[date]:
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    value = as_date(str(raw))
    if value is None:
        raise ValidationError(f"'{key}' is not a valid date.")
    return value


def opt_time(data: Mapping[str, Any], key: str) -> Optional[time]:
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    value = parse_time_of_day(str(raw))
    if value is None:
        raise ValidationError(f"'{key}' must be formatted HH:MM[:SS].")
    return value


def opt_duration(data: Mapping[str, Any], key: str) -> Optional[timedelta]:
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    value = parse_duration(str(raw))
    if value is None:
        raise ValidationError(f"'{key}' must be a duration (HH:MM[:SS] or minutes).")
    return value


def query_date(key: str) -> date:
    value = opt_date(request.args, key)
    if value is None:
        raise ValidationError(f"Query parameter '{key}' is required.")
    return value
