"""IO bus: owns the attached devices and routes byte accesses to them."""

from __future__ import annotations

import sys

from rich.console import Console
from rich.markup import escape

from ..devices import spi  # noqa: F401  # registers the "spi" device class
from .device import HANDLED, PASS, ConfigError, SimioDevice
from .registry import find_class
from .sfr import SfrBank


class SimioBus:
    """Routes byte accesses to attached devices and runs device commands.

    The SFR bank answers first, then each device in attach order. A read
    stops at the first device that claims it. A write is offered to
    every device, since several devices may watch the same address.

    Errors from device commands are printed to ``console`` and turned
    into a False return, leaving the device unchanged.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console(file=sys.stderr)
        self.sfr = SfrBank()
        self._devices: dict[str, SimioDevice] = {}

    def _error(self, message: str) -> None:
        self.console.print(f"[bold red]error:[/bold red] {escape(message)}")

    @property
    def devices(self) -> dict[str, SimioDevice]:
        """Attached devices by name, in attach order."""
        return dict(self._devices)

    def get(self, name: str) -> SimioDevice | None:
        return self._devices.get(name)

    def add(self, class_name: str, name: str, args: list[str]) -> bool:
        """Create a device of the given class and attach it under name.

        Args:
            class_name: Registered device class, e.g. ``"spi"``.
            name: Unique instance name.
            args: Extra arguments passed to the class factory.

        Returns:
            True if the device was attached.
        """
        if name in self._devices:
            self._error(f"device already exists: {name}")
            return False
        device_class = find_class(class_name)
        if device_class is None:
            self._error(f"no such device class: {class_name}")
            return False
        try:
            device = device_class.create(list(args), self.sfr)
        except (OSError, ValueError) as e:
            self._error(f"{device_class.name}: can't create device: {e}")
            return False
        self._devices[name] = device
        return True

    def remove(self, name: str) -> bool:
        """Detach a device and release its resources."""
        device = self._devices.pop(name, None)
        if device is None:
            self._error(f"no such device: {name}")
            return False
        device.destroy()
        return True

    def config(self, name: str, param: str, args: list[str]) -> bool:
        """Apply a configuration parameter to a device.

        Returns:
            True on success. On failure the error is printed and the
            device keeps its previous configuration.
        """
        device = self._devices.get(name)
        if device is None:
            self._error(f"no such device: {name}")
            return False
        try:
            device.config(param, list(args))
        except ConfigError as e:
            self._error(f"{name}: config: {e}")
            return False
        return True

    def info(self, name: str) -> str | None:
        """Return a device's state report, or None if it does not exist."""
        device = self._devices.get(name)
        if device is None:
            self._error(f"no such device: {name}")
            return None
        return device.info()

    def reset(self) -> None:
        """Reset the SFRs and every device."""
        self.sfr.reset()
        for device in self._devices.values():
            device.reset()

    def read_b(self, addr: int) -> tuple[int, int]:
        """Read a byte from the first device that claims addr.

        Returns:
            (HANDLED, value) if a device answered, else (PASS, 0).
        """
        code, value = self.sfr.read_b(addr)
        if code == HANDLED:
            return code, value
        for device in self._devices.values():
            code, value = device.read_b(addr)
            if code == HANDLED:
                return code, value
        return PASS, 0

    def write_b(self, addr: int, value: int) -> int:
        """Offer a byte write to the SFRs and every device.

        Returns:
            HANDLED if any device claimed the write, else PASS.
        """
        result = self.sfr.write_b(addr, value)
        for device in self._devices.values():
            if device.write_b(addr, value) == HANDLED:
                result = HANDLED
        return result

    def close(self) -> None:
        """Destroy all attached devices."""
        for device in self._devices.values():
            device.destroy()
        self._devices.clear()
