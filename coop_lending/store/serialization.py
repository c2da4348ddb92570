"""JSON layout of persisted records.

Records are stored as camelCase JSON objects. Money is written as plain
numbers, dates as ISO strings and enums by value. Reading is lenient about
absent optional fields (numbers default to 0) and strict about structure:
a record that is not an object, lacks a required field or carries an
unknown enum value raises ``SchemaError``.
"""

import json
import types
from dataclasses import MISSING, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

from coop_lending.engine.amounts import to_amount, to_int
from coop_lending.exceptions import SchemaError
from coop_lending.models.lending import Customer, MarketingTarget

T = TypeVar("T")

_KEY_OVERRIDES = {
    "blocked_amount_sk": "blockedAmountSK",
}


def camel_key(name: str) -> str:
    """Convert a snake_case field name to its persisted camelCase key."""
    if name in _KEY_OVERRIDES:
        return _KEY_OVERRIDES[name]
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_record(value)
    elif isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def to_record(obj: Any) -> dict[str, Any]:
    """Convert a dataclass to its persisted dict, skipping unset optionals."""
    record = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        record[camel_key(f.name)] = serialize_value(value)
    return record


def from_record(cls: type[T], data: Any) -> T:
    """Build a dataclass from its persisted dict.

    Raises
    ------
    SchemaError
        If ``data`` is not an object, a required field is missing, or a
        value cannot be converted.
    """
    if not isinstance(data, dict):
        raise SchemaError(f"{cls.__name__} record must be an object, got {type(data).__name__}")

    hints = get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = camel_key(f.name)
        has_default = f.default is not MISSING or f.default_factory is not MISSING
        if key in data and not (data[key] is None and has_default):
            kwargs[f.name] = _convert(hints[f.name], data[key], f.name)
        elif not has_default:
            raise SchemaError(f"{cls.__name__} record is missing {key!r}")
    return cls(**kwargs)


def customer_to_dict(customer: Customer) -> dict[str, Any]:
    return to_record(customer)


def customer_from_dict(data: Any) -> Customer:
    return from_record(Customer, data)


def target_to_dict(target: MarketingTarget) -> dict[str, Any]:
    """Persisted marketing target, including the derived week totals."""
    record = to_record(target)
    for idx, total in enumerate(target.week_totals, start=1):
        record[f"week{idx}"] = serialize_value(total)
    return record


def target_from_dict(data: Any) -> MarketingTarget:
    return from_record(MarketingTarget, data)


def dump_collection(records: list[Any]) -> str:
    """Serialize a collection of records to a JSON array string."""
    payload = [
        target_to_dict(r) if isinstance(r, MarketingTarget) else to_record(r)
        for r in records
    ]
    return json.dumps(payload, ensure_ascii=False)


def load_collection(cls: type[T], raw: str) -> list[T]:
    """Parse a JSON array string into records.

    Raises
    ------
    SchemaError
        If ``raw`` is not JSON, not an array, or any element is malformed.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise SchemaError(f"Stored {cls.__name__} collection is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise SchemaError(f"Stored {cls.__name__} collection must be an array")
    return [from_record(cls, item) for item in data]


def parse_date(value: Any) -> date | None:
    """Parse an ISO date (or the date part of an ISO timestamp); None if blank or invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _parse_datetime(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise SchemaError(f"Invalid timestamp for {field_name}: {value!r}") from exc


def _enum_member(enum_cls: type[Enum], value: Any, field_name: str) -> Enum:
    for member in enum_cls:
        if value in (member.value, member.name, getattr(member, "label", None)):
            return member
    raise SchemaError(f"Unknown {enum_cls.__name__} for {field_name}: {value!r}")


def _convert(tp: Any, value: Any, field_name: str) -> Any:
    origin = get_origin(tp)

    if origin in (Union, types.UnionType):
        if value is None or value == "":
            return None
        inner = [arg for arg in get_args(tp) if arg is not type(None)]
        return _convert(inner[0], value, field_name)

    if origin is list:
        if not isinstance(value, list):
            raise SchemaError(f"{field_name} must be an array")
        (item_tp,) = get_args(tp)
        return [_convert(item_tp, item, field_name) for item in value]

    if origin is dict:
        if not isinstance(value, dict):
            raise SchemaError(f"{field_name} must be an object")
        _, value_tp = get_args(tp)
        return {str(k): _convert(value_tp, v, field_name) for k, v in value.items()}

    if is_dataclass(tp):
        return from_record(tp, value)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return _enum_member(tp, value, field_name)
    if tp is Decimal:
        return to_amount(value)
    if tp is int:
        return to_int(value)
    if tp is str:
        return "" if value is None else str(value)
    if tp is datetime:
        return _parse_datetime(value, field_name)
    if tp is date:
        return parse_date(value)
    return value


def coerce_field(cls: type, name: str, value: Any) -> Any:
    """Convert raw input to the declared type of a dataclass field.

    Raises
    ------
    SchemaError
        If ``cls`` has no such field or the value cannot be interpreted.
    """
    hints = get_type_hints(cls)
    if name not in hints:
        raise SchemaError(f"{cls.__name__} has no field {name!r}")
    return _convert(hints[name], value, name)
