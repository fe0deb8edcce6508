"""Validation helpers shared by the JSON payload forms."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, ClassVar, Iterable, Optional

from ..errors import ValidationError


@dataclass
class PayloadForm:
    """Represents request payload input prior to validation.

    ``FIELDS`` maps payload keys (camelCase, as the dashboards send them) to
    the snake_case names services accept. ``cleaned`` only holds keys that
    were present in the payload, so partial forms double as update patches.
    """

    FIELDS: ClassVar[dict[str, str]] = {}

    partial: bool = False
    raw_data: dict[str, Any] = field(default_factory=dict, init=False)
    cleaned: dict[str, Any] = field(default_factory=dict, init=False)
    errors: dict[str, list[str]] = field(default_factory=dict, init=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, partial: bool = False):
        """Create a form populated from request data."""

        form = cls(partial=partial)
        form.load(data)
        return form

    def load(self, data: Mapping[str, Any]) -> None:
        self.raw_data = {key: data[key] for key in self.FIELDS if key in data}

    def validate(self) -> bool:
        """Validate the bound data and populate ``cleaned``."""

        self.errors.clear()
        self.cleaned = {}
        self.clean()
        return not self.errors

    def clean(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def validated_data(self) -> dict[str, Any]:
        """Return cleaned data or raise a ``ValidationError`` listing field errors."""

        if not self.validate():
            raise ValidationError("Please check the provided details.", errors=self.errors)
        return self.cleaned

    # ------------------------------------------------------------------
    # Field helpers
    # ------------------------------------------------------------------

    def _add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, []).append(message)

    def _raw(self, key: str, *, required: bool) -> tuple[bool, Any]:
        """Return (present, value); flags required keys missing from full forms."""

        if key not in self.raw_data:
            if required and not self.partial:
                self._add_error(key, "This field is required.")
            return False, None
        value = self.raw_data[key]
        if isinstance(value, str):
            value = value.strip()
        if value in (None, ""):
            # Blank optional fields are left out so model defaults apply.
            if required:
                self._add_error(key, "This field is required.")
            return False, None
        return True, value

    def _text(self, key: str, *, required: bool = False, max_length: int = 255) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        text = str(value)
        if len(text) > max_length:
            self._add_error(key, f"Must be at most {max_length} characters.")
            return
        self.cleaned[self.FIELDS[key]] = text

    def _email(self, key: str, *, required: bool = False) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        text = str(value).lower()
        local, _, domain = text.partition("@")
        if not local or "." not in domain:
            self._add_error(key, "Enter a valid email address.")
            return
        self.cleaned[self.FIELDS[key]] = text

    def _number(
        self,
        key: str,
        *,
        required: bool = False,
        minimum: Optional[float] = None,
        integer: bool = False,
    ) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        try:
            if isinstance(value, bool):
                raise TypeError
            number = float(value)
        except (TypeError, ValueError):
            self._add_error(key, "Enter a valid number.")
            return
        if not math.isfinite(number):
            self._add_error(key, "Enter a valid number.")
            return
        if integer and not number.is_integer():
            self._add_error(key, "Enter a whole number.")
            return
        if minimum is not None and number < minimum:
            self._add_error(key, f"Must be at least {minimum:g}.")
            return
        self.cleaned[self.FIELDS[key]] = int(number) if integer else number

    def _date(self, key: str, *, required: bool = False) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        try:
            # Accept full ISO timestamps from date pickers; keep the date part.
            parsed = date.fromisoformat(str(value)[:10])
        except ValueError:
            self._add_error(key, "Enter a valid date (YYYY-MM-DD).")
            return
        self.cleaned[self.FIELDS[key]] = parsed

    def _choice(self, key: str, choices: Iterable[str], *, required: bool = False) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        allowed = tuple(choices)
        if value not in allowed:
            self._add_error(key, f"Must be one of: {', '.join(allowed)}.")
            return
        self.cleaned[self.FIELDS[key]] = value

    def _string_list(self, key: str, *, required: bool = False) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            self._add_error(key, "Must be a list of strings.")
            return
        self.cleaned[self.FIELDS[key]] = list(value)

    def _mapping(self, key: str, *, required: bool = False) -> None:
        present, value = self._raw(key, required=required)
        if not present:
            return
        if not isinstance(value, Mapping):
            self._add_error(key, "Must be an object.")
            return
        self.cleaned[self.FIELDS[key]] = dict(value)
