"""Device class table: maps class names to device factories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .device import SimioDevice
from .sfr import SfrBank

DeviceFactory = Callable[[list[str], SfrBank], SimioDevice]


@dataclass(frozen=True)
class DeviceClass:
    """A named kind of device that the bus can instantiate.

    ``create`` receives the remaining ``add`` arguments and the shared
    SFR bank. It raises on failure; the bus reports the error and
    attaches nothing.
    """

    name: str
    help: str
    create: DeviceFactory


_CLASSES: dict[str, DeviceClass] = {}


def register_class(device_class: DeviceClass) -> None:
    """Add a device class to the table.

    Raises:
        ValueError: If a class with the same name is already registered.
    """
    key = device_class.name.lower()
    if key in _CLASSES:
        raise ValueError(f"Device class already registered: {device_class.name}")
    _CLASSES[key] = device_class


def find_class(name: str) -> DeviceClass | None:
    """Look up a device class by name (case-insensitive)."""
    return _CLASSES.get(name.lower())


def device_classes() -> list[DeviceClass]:
    """Return all registered classes sorted by name."""
    return [_CLASSES[k] for k in sorted(_CLASSES)]
