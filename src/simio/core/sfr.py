"""Special function registers: interrupt enable and flag bytes shared by all devices."""

from .device import HANDLED, PASS

# Register indices, which are also their bus addresses
IE1 = 0
IE2 = 1
IFG1 = 2
IFG2 = 3

SFR_NAMES: list[str] = ["IE1", "IE2", "IFG1", "IFG2"]
SFR_SIZE = len(SFR_NAMES)


class SfrBank:
    """Bank of 8-bit interrupt enable/flag registers.

    Each device owns specific bits in these registers and must only
    touch them through modify(), so bits owned by other devices are
    preserved.
    """

    def __init__(self) -> None:
        self._regs = bytearray(SFR_SIZE)

    def _check(self, reg: int) -> None:
        if reg < 0 or reg >= SFR_SIZE:
            raise IndexError(f"No such SFR: {reg}")

    def get(self, reg: int) -> int:
        """Read a register value."""
        self._check(reg)
        return self._regs[reg]

    def set(self, reg: int, value: int) -> None:
        """Overwrite a whole register."""
        self._check(reg)
        self._regs[reg] = value & 0xFF

    def modify(self, reg: int, mask: int, value: int) -> None:
        """Set the bits selected by mask to the matching bits of value.

        Bits outside mask are left untouched.

        Args:
            reg: Register index (IE1, IE2, IFG1 or IFG2).
            mask: Bits to change.
            value: New values for the masked bits.
        """
        self._check(reg)
        mask &= 0xFF
        self._regs[reg] = (self._regs[reg] & ~mask) | (value & mask)

    def reset(self) -> None:
        """Clear all registers."""
        for i in range(SFR_SIZE):
            self._regs[i] = 0

    def read_b(self, addr: int) -> tuple[int, int]:
        """Read a register through the bus."""
        if 0 <= addr < SFR_SIZE:
            return HANDLED, self._regs[addr]
        return PASS, 0

    def write_b(self, addr: int, value: int) -> int:
        """Write a register through the bus."""
        if 0 <= addr < SFR_SIZE:
            self._regs[addr] = value & 0xFF
            return HANDLED
        return PASS
