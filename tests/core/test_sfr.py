"""Tests for the shared SFR bank."""

import pytest

from simio.core.device import HANDLED, PASS
from simio.core.sfr import IE1, IFG1, IFG2, SFR_SIZE, SfrBank


class TestSfrBank:
    """Tests for register access and masked modify."""

    def test_starts_cleared(self) -> None:
        sfr = SfrBank()
        assert [sfr.get(i) for i in range(SFR_SIZE)] == [0, 0, 0, 0]

    def test_modify_sets_masked_bits(self) -> None:
        sfr = SfrBank()
        sfr.modify(IFG2, 0x04, 0x04)
        assert sfr.get(IFG2) == 0x04

    def test_modify_leaves_other_bits(self) -> None:
        """Bits outside the mask keep their value."""
        sfr = SfrBank()
        sfr.set(IFG2, 0xA0)
        sfr.modify(IFG2, 0x0F, 0xFF)
        assert sfr.get(IFG2) == 0xAF
        sfr.modify(IFG2, 0x80, 0x00)
        assert sfr.get(IFG2) == 0x2F

    def test_modify_ignores_value_bits_outside_mask(self) -> None:
        sfr = SfrBank()
        sfr.modify(IFG1, 0x01, 0xFF)
        assert sfr.get(IFG1) == 0x01

    def test_modify_wide_mask_truncated(self) -> None:
        sfr = SfrBank()
        sfr.modify(IFG2, 0x200, 0x200)
        assert sfr.get(IFG2) == 0

    def test_modify_is_per_register(self) -> None:
        sfr = SfrBank()
        sfr.modify(IFG2, 0x04, 0x04)
        assert sfr.get(IFG1) == 0
        assert sfr.get(IE1) == 0

    def test_reset_clears(self) -> None:
        sfr = SfrBank()
        sfr.set(IE1, 0xFF)
        sfr.set(IFG2, 0x12)
        sfr.reset()
        assert sfr.get(IE1) == 0
        assert sfr.get(IFG2) == 0

    def test_bad_register_raises(self) -> None:
        sfr = SfrBank()
        with pytest.raises(IndexError):
            sfr.modify(7, 0x01, 0x01)

    def test_bus_access(self) -> None:
        """The bank answers bus accesses at its own addresses only."""
        sfr = SfrBank()
        assert sfr.write_b(IFG2, 0x1FF) == HANDLED
        assert sfr.read_b(IFG2) == (HANDLED, 0xFF)
        assert sfr.write_b(0x10, 0x01) == PASS
        assert sfr.read_b(0x10)[0] == PASS
