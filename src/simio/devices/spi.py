"""SPI device: byte exchange with an external peer over a request-reply channel.

The device models the data registers of a USCI-B style SPI port. A
write to the TX address sends the byte to the peer and raises the RX
interrupt flag. The matching reply is fetched lazily on the next read
of the RX address, so each transmitted byte is paired with exactly one
received byte.
"""

from __future__ import annotations

from enum import Enum

from ..core.device import HANDLED, PASS, ConfigError, get_arg
from ..core.expr import ExprError, expr_eval
from ..core.registry import DeviceClass, register_class
from ..core.sfr import IFG2, SfrBank
from ..transport.channel import DEFAULT_CHANNEL, Channel, ZmqChannel, default_endpoint

# Defaults match UCB0 on the MSP430x2xx family
DEFAULT_RX_ADDR = 0x006E
DEFAULT_TX_ADDR = 0x006F
DEFAULT_IRQ_BIT = 2  # UCB0RXIFG = 0x04


class Op(Enum):
    """Most recent access to the device's data registers."""

    READ = "R"
    WRITE = "W"


class SPI:
    """SPI data-register pair bridged to an external peer.

    Args:
        sfr: Shared SFR bank holding the interrupt flag register.
        channel: Request-reply channel to the peer. The device owns it
            and releases it in destroy().
        irq_register: SFR index where the interrupt bit lives.
    """

    def __init__(self, sfr: SfrBank, channel: Channel, irq_register: int = IFG2) -> None:
        self.sfr = sfr
        self.channel = channel
        self.irq_register = irq_register
        self.interrupt_bit = DEFAULT_IRQ_BIT
        self.rx_addr = DEFAULT_RX_ADDR
        self.tx_addr = DEFAULT_TX_ADDR
        self.rx_reg = 0
        self.last_op = Op.READ

    @property
    def irq_mask(self) -> int:
        """Bit mask of the interrupt bit; 0 when the bit lies outside the register."""
        if not 0 <= self.interrupt_bit < 8:
            return 0
        return 1 << self.interrupt_bit

    def reset(self) -> None:
        """Clear the interrupt flag and the cached RX byte.

        Addresses and the channel are left as configured.
        """
        self.sfr.modify(self.irq_register, self.irq_mask, 0)
        self.rx_reg = 0
        self.last_op = Op.READ

    def destroy(self) -> None:
        self.channel.release()

    def write_b(self, addr: int, value: int) -> int:
        """Send a byte to the peer when the TX address is written.

        The interrupt flag is raised as soon as the request is sent, before
        any reply has been seen. The write is never claimed, so other
        devices on the bus also observe it.
        """
        if addr == self.tx_addr:
            mask = self.irq_mask
            self.channel.send(value & 0xFF)
            self.sfr.modify(self.irq_register, mask, mask)
            self.last_op = Op.WRITE
        return PASS

    def read_b(self, addr: int) -> tuple[int, int]:
        """Return the RX byte, fetching the peer's reply if one is owed.

        Repeated reads without an intervening write return the cached
        byte and do not touch the channel.
        """
        if addr != self.rx_addr:
            return PASS, 0
        if self.last_op is Op.WRITE:
            self.rx_reg = self.channel.receive()
        self.last_op = Op.READ
        return HANDLED, self.rx_reg

    def config(self, param: str, args: list[str]) -> None:
        """Apply one of the parameters ``rx``, ``tx``, ``irq_bit``, ``endpoint``.

        Raises:
            ConfigError: On a missing or invalid argument, a bad endpoint,
                or an unknown parameter. Nothing is changed in that case.
        """
        key = param.lower()
        if key == "rx":
            self.rx_addr = _parse_value(args, "address")
        elif key == "tx":
            self.tx_addr = _parse_value(args, "address")
        elif key == "irq_bit":
            self.interrupt_bit = _parse_value(args, "interrupt number")
        elif key == "endpoint":
            endpoint = get_arg(args)
            if endpoint is None:
                raise ConfigError("expected endpoint")
            if not self.channel.reconfigure(endpoint):
                raise ConfigError(f"bad endpoint: {endpoint}")
            # The new channel has no request outstanding, so a reply owed
            # by the old peer can no longer be collected.
            self.last_op = Op.READ
        else:
            raise ConfigError(f"unknown parameter: {param}")

    def info(self) -> str:
        lines = [
            f"Rx address:          0x{self.rx_addr:04x}",
            f"Tx address:          0x{self.tx_addr:04x}",
            f"RxIFG mask:          0x{self.irq_mask:02x}",
            f"0MQ data endpoint:   {self.channel.describe()}",
            f"last op:             {self.last_op.value}",
            f"Rx value:            0x{self.rx_reg:02x}",
        ]
        return "\n".join(lines)


def _parse_value(args: list[str], what: str) -> int:
    text = get_arg(args)
    if text is None:
        raise ConfigError(f"expected {what}")
    try:
        return expr_eval(text)
    except ExprError as e:
        raise ConfigError(f"can't parse {what}: {text}") from e


def create_spi(args: list[str], sfr: SfrBank) -> SPI:
    """Create an SPI device attached to its channel's default endpoint.

    Args:
        args: Optional channel name (default ``UCB0``).
        sfr: Shared SFR bank.

    Raises:
        TransportError: If the channel cannot be opened.
    """
    channel_name = get_arg(args) or DEFAULT_CHANNEL
    return SPI(sfr, ZmqChannel(default_endpoint(channel_name)))


register_class(DeviceClass(
    name="spi",
    help="SPI data registers bridged to a ZeroMQ peer.\n"
         "Usage: add spi <name> [channel]\n"
         "Config: rx <addr>, tx <addr>, irq_bit <n>, endpoint <uri>",
    create=create_spi,
))
