"""
Argument resolver: ordered ParameterDescriptors + ParsedArgv -> ordered values.

For each descriptor, in declaration order
- rest: every positional token not consumed yet is appended verbatim, then stop.
- otherwise a raw value is looked up by long flag key, short flag key, each alias
  in listed order, then the next unconsumed positional token.
- no raw value: a required parameter fails with MissingArgumentError; an optional
  one halts resolution, later parameters are never resolved even when positional
  tokens remain for them.
- a native boolean bound to a boolean parameter passes through; every other raw
  value goes through coercion (a native boolean is spelled "true"/"false" first).

Coercion faults are re-raised with the parameter name prefixed to the message
and a `parameter` option; the caller attaches the usage hint.
"""
import copy
import logging
from collections import deque

from . import coercion
from .descriptors import ParamType
from .faults import *
from .utils import Unset

logger = logging.getLogger(__name__)


def _key(token):
    return token[2:] if token.startswith("--") else token[1:]


def lookup(param, flags, /):
    """
    Raw flag value bound to a parameter, or Unset when no flag token names it.
    """
    if param.flag is None:
        return Unset
    for token in param.flag.names:
        if (key := _key(token)) in flags:
            return flags[key]
    return Unset


def resolve(params, parsed, /):
    """
    Bind a ParsedArgv to descriptors.

    Parameters
    - params: iterable of ParameterDescriptor (context parameter excluded).
    - parsed: ParsedArgv.

    Returns
    - list of coerced values in declaration order; rest tokens are spread at the end.

    Raises
    - MissingArgumentError, TypeMismatchError, InvalidPayloadError.
    """
    positional = deque(parsed.positional)
    values = []

    for param in params:
        if param.rest:
            values.extend(positional)
            positional.clear()
            break

        if (value := lookup(param, parsed.flags)) is Unset and positional:
            value = positional.popleft()

        if value is Unset:
            if param.required:
                raise MissingArgumentError(
                    "missing required argument <%s> (%s)" % (param.name, param.type),
                    title="missing argument",
                    code=FaultCode.MISSING_ARGUMENT,
                    parameter=param.name,
                    expected=str(param.type),
                    docs=getdoc(FaultCode.MISSING_ARGUMENT),
                )
            logger.debug("optional parameter %r unresolved, resolution stops", param.name)
            break

        if isinstance(value, bool):
            if param.type == ParamType.BOOLEAN:
                values.append(value)
                continue
            value = coercion.totext(value)

        try:
            values.append(coercion.coerce(value, param.type))
        except (TypeMismatchError, InvalidPayloadError) as fault:
            raise copy.replace(
                fault, message="%s: %s" % (param.name, fault.message), parameter=param.name
            ) from None

    return values


__all__ = (
    "lookup",
    "resolve",
)
