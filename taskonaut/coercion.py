"""
String -> typed value conversion for resolved CLI tokens.

Rules per ParamType
- string: identity.
- number: Python numeric literal; "", non-ASCII digits and non-numeric or
  non-finite text (nan, inf, infinity) fail.
- boolean: "true"/"1" -> True, "false"/"0" -> False; anything else fails.
- object: JSON text decoding to a mapping; lists, primitives and null fail.
- array: JSON text decoding to a list.

Failures raise TypeMismatchError (wrong shape) or InvalidPayloadError
(undecodable JSON). Both carry `expected` and `input` options; the resolver
adds the parameter name.
"""
import json
import math

from .descriptors import ParamType
from .faults import *


def _kind(object):
    """
    JSON-flavoured kind name used in messages.
    """
    match object:
        case None:
            return "null"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list():
            return "array"
        case dict():
            return "object"
    return type(object).__name__


def _mismatch(expected, value, got=None):
    return TypeMismatchError(
        "expected %s, got %s" % (expected, got if got is not None else repr(value)),
        title="type mismatch",
        code=FaultCode.TYPE_MISMATCH,
        expected=str(expected),
        input=value,
        docs=getdoc(FaultCode.TYPE_MISMATCH),
    )


def _number(value):
    # ASCII only: int() and float() also take non-ASCII digits, which no literal allows.
    if not value.isascii():
        raise _mismatch(ParamType.NUMBER, value)
    # Decimal integers first so "10" stays an int, then prefixed literals (0x1f, 0o17, 0b11).
    for convert in (int, lambda text: int(text, 0)):
        try:
            return convert(value)
        except ValueError:
            pass
    try:
        number = float(value)
    except ValueError:
        raise _mismatch(ParamType.NUMBER, value) from None
    if not math.isfinite(number):
        raise _mismatch(ParamType.NUMBER, value)
    return number


def _json(value, expected):
    try:
        return json.loads(value)
    except json.JSONDecodeError as error:
        raise InvalidPayloadError(
            "invalid json for %s: %s" % (expected, error.msg.lower()),
            title="invalid payload",
            code=FaultCode.INVALID_PAYLOAD,
            expected=str(expected),
            input=value,
            docs=getdoc(FaultCode.INVALID_PAYLOAD),
        ) from None


def coerce(value, type, /):
    """
    Convert a raw CLI string into a value of the given ParamType.

    Parameters
    - value: str, the raw token.
    - type: ParamType (or its string name).

    Returns
    - str | int | float | bool | dict | list depending on type.

    Raises
    - TypeMismatchError, InvalidPayloadError.
    """
    if not isinstance(value, str):
        raise TypeError("coerce() first argument must be a string")

    match ParamType(type):
        case ParamType.STRING:
            return value
        case ParamType.NUMBER:
            if not value.strip():
                raise _mismatch(ParamType.NUMBER, value)
            return _number(value)
        case ParamType.BOOLEAN:
            if value in ("true", "1"):
                return True
            if value in ("false", "0"):
                return False
            raise _mismatch(ParamType.BOOLEAN, value)
        case ParamType.OBJECT:
            parsed = _json(value, ParamType.OBJECT)
            if not isinstance(parsed, dict):
                raise _mismatch(ParamType.OBJECT, value, _kind(parsed))
            return parsed
        case ParamType.ARRAY:
            parsed = _json(value, ParamType.ARRAY)
            if not isinstance(parsed, list):
                raise _mismatch(ParamType.ARRAY, value, _kind(parsed))
            return parsed


def totext(value, /):
    """
    Inverse of coerce() for already-typed values: the text a user would type.

    Booleans use their JSON spelling ("true"/"false"), containers are JSON
    encoded, everything else goes through str().
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


__all__ = (
    "coerce",
    "totext",
)
