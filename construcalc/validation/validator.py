"""Validator — turns a raw input map into typed values or field errors.

Usage::

    from construcalc.validation import validate

    outcome = validate(template, {"areaVivienda": "150", ...})
    if outcome.ok:
        values = outcome.values
    else:
        errors = outcome.errors

The validator is a pure function over the template and the raw inputs.
Each field yields at most one error message.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from construcalc.errors import ValidationError
from construcalc.models.parameter import Parameter, ParameterType
from construcalc.models.template import Template

logger = logging.getLogger(__name__)

MSG_REQUIRED = "{label} es requerido"
MSG_INVALID_NUMBER = "Debe ser un número válido"
MSG_MIN = "Valor mínimo: {min}"
MSG_MAX = "Valor máximo: {max}"
MSG_INVALID_OPTION = "Opción inválida"
MSG_INVALID_BOOLEAN = "Debe ser verdadero o falso"
MSG_INVALID_FORMAT = "Formato inválido"

_TRUE_STRINGS = {"true", "1", "yes", "si", "sí"}
_FALSE_STRINGS = {"false", "0", "no"}


class ValidationOutcome:
    """Result of :func:`validate`: typed values or per-field errors."""

    def __init__(
        self,
        values: dict[str, Any] | None = None,
        errors: dict[str, str] | None = None,
    ) -> None:
        self.errors = errors or {}
        # Values are only exposed when every field passed
        self.values = {} if self.errors else (values or {})

    @property
    def ok(self) -> bool:
        return not self.errors

    def error(self) -> ValidationError | None:
        """The typed error for a failed outcome, or *None*."""
        if self.ok:
            return None
        return ValidationError(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": self.ok, "values": dict(self.values), "errors": dict(self.errors)}

    def __repr__(self) -> str:
        if self.ok:
            return f"ValidationOutcome(ok, values={self.values!r})"
        return f"ValidationOutcome(errors={self.errors!r})"


def is_absent(value: Any) -> bool:
    """Missing, ``None`` or a blank string."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def parse_number(value: Any) -> float | None:
    """Parse a numeric input.  Returns *None* when it is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_boolean(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return None


def _format_bound(bound: float) -> str:
    return f"{bound:g}"


def validate_parameter(param: Parameter, value: Any) -> tuple[Any, str | None]:
    """Check one present value against *param*.

    Returns ``(typed_value, None)`` on success or ``(None, message)``.
    """
    if param.type is ParameterType.NUMBER:
        number = parse_number(value)
        if number is None:
            return None, MSG_INVALID_NUMBER
        if param.min is not None and number < param.min:
            return None, MSG_MIN.format(min=_format_bound(param.min))
        if param.max is not None and number > param.max:
            return None, MSG_MAX.format(max=_format_bound(param.max))
        return number, None

    if param.type is ParameterType.SELECT:
        text = str(value).strip()
        if text not in param.options:
            return None, MSG_INVALID_OPTION
        return text, None

    if param.type is ParameterType.BOOLEAN:
        flag = parse_boolean(value)
        if flag is None:
            return None, MSG_INVALID_BOOLEAN
        return flag, None

    text = str(value)
    if param.pattern and re.fullmatch(param.pattern, text) is None:
        return None, param.pattern_message or MSG_INVALID_FORMAT
    return text, None


def validate(template: Template, raw_inputs: dict[str, Any]) -> ValidationOutcome:
    """Validate *raw_inputs* against every parameter of *template*, in order.

    A missing required field reports only the required message.  Optional
    fields left empty are omitted from the typed values.
    """
    values: dict[str, Any] = {}
    errors: dict[str, str] = {}

    for param in template.parameters:
        raw = raw_inputs.get(param.name)

        if is_absent(raw):
            if param.required:
                errors[param.name] = MSG_REQUIRED.format(label=param.display_label)
            continue

        typed, message = validate_parameter(param, raw)
        if message is not None:
            errors[param.name] = message
        else:
            values[param.name] = typed

    unknown = set(raw_inputs) - set(template.parameter_names())
    if unknown:
        logger.debug(
            "Ignoring unknown inputs for template %s: %s",
            template.id,
            sorted(unknown),
        )

    return ValidationOutcome(values=values, errors=errors)
