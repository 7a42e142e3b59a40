from __future__ import annotations

from typing import Any

_TYPE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "boolean": lambda v: isinstance(v, bool),
    "integer": lambda v: (isinstance(v, int) and not isinstance(v, bool))
    or (isinstance(v, float) and v.is_integer()),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
}


class SchemaError(ValueError):
    pass


def validate_args(schema: dict[str, Any], args: Any) -> None:
    """Check tool input against the subset of JSONSchema tools declare.

    Only the top level is checked: the input must be an object, required keys
    present, and declared primitive types respected. Unknown keys pass through.
    """
    if not isinstance(args, dict):
        raise SchemaError(f"expected an object, got {type(args).__name__}")

    for key in schema.get("required", []) or []:
        if args.get(key) is None:
            raise SchemaError(f"missing required field '{key}'")

    props = schema.get("properties", {}) or {}
    for key, value in args.items():
        if value is None:
            continue
        prop = props.get(key)
        if not isinstance(prop, dict):
            continue
        declared = prop.get("type")
        types = declared if isinstance(declared, list) else [declared]
        checks = [_TYPE_CHECKS[t] for t in types if t in _TYPE_CHECKS]
        if checks and not any(chk(value) for chk in checks):
            raise SchemaError(f"field '{key}' must be {' or '.join(str(t) for t in types)}")
        enum = prop.get("enum")
        if isinstance(enum, list) and value not in enum:
            raise SchemaError(f"field '{key}' must be one of: {', '.join(map(str, enum))}")
