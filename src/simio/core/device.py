"""Base protocol for simulated IO devices."""

from typing import Protocol, runtime_checkable

# Handled codes returned by read_b/write_b
HANDLED = 0  # the device claimed the access
PASS = 1     # offer the access to the next device


class ConfigError(ValueError):
    """A device configuration command was rejected. No state was changed."""


def get_arg(args: list[str]) -> str | None:
    """Pop the next argument token, or return None if none are left."""
    if not args:
        return None
    return args.pop(0)


@runtime_checkable
class SimioDevice(Protocol):
    """Protocol for devices attached to the simulated IO bus.

    Devices see byte-level accesses at absolute addresses and decide
    for themselves whether an address belongs to them. The bus offers
    each access to every device in attach order.
    """

    def config(self, param: str, args: list[str]) -> None:
        """Apply a named configuration parameter.

        Raises:
            ConfigError: If the parameter or its argument is invalid.
        """
        ...

    def info(self) -> str:
        """Return a multi-line report of the device state."""
        ...

    def reset(self) -> None:
        """Return the device to its power-on state."""
        ...

    def read_b(self, addr: int) -> tuple[int, int]:
        """Read a byte. Returns (handled_code, value)."""
        ...

    def write_b(self, addr: int, value: int) -> int:
        """Write a byte. Returns the handled code."""
        ...

    def destroy(self) -> None:
        """Release resources held by the device."""
        ...
