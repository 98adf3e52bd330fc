"""Typed key/value settings with per-key change notifications.

Keys use the hyphenated gsettings spelling (`manual-schedule`) and map onto
the fields of a pydantic model (`manual_schedule`). Every write goes through
model validation, so values reaching the engine are always in range.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Iterable, TypeVar

from pydantic import BaseModel, ValidationError

from nightswitch.common.exceptions import SettingsError
from nightswitch.common.signals import Signal, Subscription

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def key_to_field(key: str) -> str:
    return key.replace("-", "_")


def field_to_key(field: str) -> str:
    return field.replace("_", "-")


class SettingsStore(Generic[M]):
    """One settings section, readable and writable by key."""

    def __init__(self, model: M, name: str | None = None):
        self._model = model
        self._name = name or type(model).__name__
        self._signals: dict[str, Signal] = {}
        self._any = Signal(f"{self._name}::changed")

    @property
    def name(self) -> str:
        return self._name

    @property
    def model(self) -> M:
        return self._model

    def keys(self) -> list[str]:
        return [field_to_key(f) for f in type(self._model).model_fields]

    def get(self, key: str) -> Any:
        return getattr(self._model, self._field(key))

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> list[str]:
        """Validate and apply several keys at once. Returns the keys that changed.

        Subscribers are notified only after every value has been applied.
        """
        fields = {self._field(k): v for k, v in values.items()}
        data = self._model.model_dump()
        data.update(fields)
        try:
            new_model = type(self._model).model_validate(data)
        except ValidationError as e:
            raise SettingsError(", ".join(values), str(e)) from e

        changed = [
            field_to_key(f) for f in fields if getattr(new_model, f) != getattr(self._model, f)
        ]
        self._model = new_model
        if not changed:
            return changed

        self._commit(changed)
        for key in changed:
            logger.debug("%s: %s changed to %r", self._name, key, self.get(key))
            signal = self._signals.get(key)
            if signal:
                signal.emit(key)
        self._any.emit(changed)
        return changed

    def connect(self, key: str, callback: Callable[[str], Any]) -> Subscription:
        """Call `callback(key)` whenever `key` changes value."""
        self._field(key)
        signal = self._signals.get(key)
        if signal is None:
            signal = self._signals[key] = Signal(f"{self._name}::{key}")
        return signal.connect(callback)

    def connect_any(self, callback: Callable[[list[str]], Any]) -> Subscription:
        """Call `callback(changed_keys)` after every write that changed something."""
        return self._any.connect(callback)

    def subscriber_count(self, keys: Iterable[str] | None = None) -> int:
        names = keys if keys is not None else list(self._signals)
        return sum(len(self._signals[k]) for k in names if k in self._signals) + len(self._any)

    def _commit(self, changed: list[str]) -> None:
        """Hook for backends that mirror writes elsewhere."""

    def _field(self, key: str) -> str:
        field = key_to_field(key)
        if field not in type(self._model).model_fields:
            raise KeyError(f"{self._name} has no key '{key}'")
        return field
