"""Typed views over the ``deckhouse`` ModuleConfig payload.

Each view wraps a dict that belongs to the cached payload and reads and
writes it in place, so changes made through ``ModuleConfig.settings`` are
what the next ``save`` sends. Wire keys keep their camelCase spelling; the
views expose snake_case properties.
"""

from __future__ import annotations

from typing import Any

WEEKDAYS: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class _PayloadView:
    """Base for live views over one dict of a payload."""

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    @property
    def raw(self) -> dict[str, Any]:
        """The underlying dict (not a copy)."""
        return self._data

    def _set_optional(self, key: str, value: Any) -> None:
        if value is None:
            self._data.pop(key, None)
        else:
            self._data[key] = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _PayloadView):
            return NotImplemented
        return type(self) is type(other) and self._data == other._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class ReleaseWindow(_PayloadView):
    """Allowed update window: a set of weekdays and a time range."""

    __slots__ = ()

    @property
    def days(self) -> list[str]:
        return list(self._data.get("days") or [])

    @days.setter
    def days(self, value: list[str]) -> None:
        invalid = [d for d in value if d not in WEEKDAYS]
        if invalid:
            raise ValueError(f"Invalid release window days: {invalid}. Must be within {WEEKDAYS}")
        self._data["days"] = list(value)

    @property
    def from_time(self) -> str:
        return str(self._data.get("from", ""))

    @from_time.setter
    def from_time(self, value: str) -> None:
        self._data["from"] = value

    @property
    def to_time(self) -> str:
        return str(self._data.get("to", ""))

    @to_time.setter
    def to_time(self, value: str) -> None:
        self._data["to"] = value


class ReleaseSettings(_PayloadView):
    """Update release policy: mode, approval mode, windows and notification."""

    __slots__ = ()

    @property
    def mode(self) -> str | None:
        return self._data.get("mode")

    @mode.setter
    def mode(self, value: str | None) -> None:
        self._set_optional("mode", value)

    @property
    def disruption_approval_mode(self) -> str | None:
        return self._data.get("disruptionApprovalMode")

    @disruption_approval_mode.setter
    def disruption_approval_mode(self, value: str | None) -> None:
        self._set_optional("disruptionApprovalMode", value)

    @property
    def windows(self) -> list[ReleaseWindow]:
        return [ReleaseWindow(w) for w in self._data.get("windows") or []]

    def add_window(self, days: list[str], from_time: str, to_time: str) -> ReleaseWindow:
        """Append a window to the payload and return its view."""
        window = ReleaseWindow({})
        window.days = days
        window.from_time = from_time
        window.to_time = to_time
        self._data.setdefault("windows", []).append(window.raw)
        return window

    def clear_windows(self) -> None:
        self._data["windows"] = []

    @property
    def notification(self) -> dict[str, Any] | None:
        """Optional notification block (webhook, minimalNotificationTime, auth)."""
        return self._data.get("notification")

    @notification.setter
    def notification(self, value: dict[str, Any] | None) -> None:
        self._set_optional("notification", value)


class DeckhouseSettings(_PayloadView):
    """The ``spec.settings`` block of the ``deckhouse`` ModuleConfig."""

    __slots__ = ()

    @property
    def bundle(self) -> str | None:
        return self._data.get("bundle")

    @bundle.setter
    def bundle(self, value: str | None) -> None:
        self._set_optional("bundle", value)

    @property
    def log_level(self) -> str | None:
        return self._data.get("logLevel")

    @log_level.setter
    def log_level(self, value: str | None) -> None:
        self._set_optional("logLevel", value)

    @property
    def release_channel(self) -> str | None:
        return self._data.get("releaseChannel")

    @release_channel.setter
    def release_channel(self, value: str | None) -> None:
        self._set_optional("releaseChannel", value)

    @property
    def release(self) -> ReleaseSettings | None:
        """Release policy, or None when the payload carries no ``release`` block.

        Absence is a valid state unless the ``ensure_release`` normalizer is
        enabled for hydration.
        """
        release = self._data.get("release")
        if release is None:
            return None
        return ReleaseSettings(release)

    @release.setter
    def release(self, value: ReleaseSettings | dict[str, Any] | None) -> None:
        if isinstance(value, ReleaseSettings):
            value = value.raw
        self._set_optional("release", value)


class ModuleConfig(_PayloadView):
    """Typed view over a whole ModuleConfig payload."""

    __slots__ = ()

    @property
    def api_version(self) -> str:
        return str(self._data.get("apiVersion", ""))

    @property
    def kind(self) -> str:
        return str(self._data.get("kind", ""))

    @property
    def metadata(self) -> dict[str, Any]:
        return self._data.setdefault("metadata", {})

    @property
    def uid(self) -> str | None:
        return self.metadata.get("uid")

    @property
    def spec(self) -> dict[str, Any]:
        return self._data.setdefault("spec", {})

    @property
    def status(self) -> dict[str, Any]:
        return self._data.get("status") or {}

    @property
    def settings(self) -> DeckhouseSettings:
        """Live view over ``spec.settings``; mutations change the pending payload."""
        return DeckhouseSettings(self.spec.setdefault("settings", {}))


def ensure_release(payload: dict[str, Any]) -> dict[str, Any]:
    """Hydration normalizer that defaults a missing ``spec.settings.release`` to ``{}``."""
    spec = payload.get("spec")
    if isinstance(spec, dict):
        settings = spec.get("settings")
        if isinstance(settings, dict) and settings.get("release") is None:
            settings["release"] = {}
    return payload
