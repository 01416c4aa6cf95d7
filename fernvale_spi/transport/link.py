#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Link initialization for the Fernvale serial bridge.

Opens the serial device exclusively, applies the fixed line discipline
(raw mode, 8N1, no flow control, requested speed on both directions) and
runs the synchronization handshake. The transport works on POSIX systems
only, it relies on the file descriptor of the serial port.
"""

import logging
import sys
import termios
from dataclasses import dataclass, field

from serial import Serial, SerialException

from fernvale_spi.exceptions import (
    ConfigureError,
    FernvaleError,
    FernvaleValueError,
    OpenError,
    SessionStateError,
)
from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.transport.session import TransportSession
from fernvale_spi.utils.fernvale_enum import FernvaleEnum

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/fernvale"


class BaudRate(FernvaleEnum):
    """Serial speeds recognized by the Fernvale bridge."""

    B115200 = (115200, "115200")
    B230400 = (230400, "230400", "Default on macOS")
    B460800 = (460800, "460800")
    B921600 = (921600, "921600", "Default on Linux")


def default_baudrate() -> int:
    """Get the default speed for the running platform.

    :return: Baud rate in bits per second.
    """
    if sys.platform.startswith("linux"):
        return BaudRate.B921600.tag
    if sys.platform == "darwin":
        return BaudRate.B230400.tag
    return BaudRate.B115200.tag


@dataclass
class LinkConfig:
    """Settings of the serial link, resolved once when the session is built.

    Timeouts are in milliseconds, 0 waits forever.
    """

    port: str = DEFAULT_PORT
    baudrate: int = field(default_factory=default_baudrate)
    sync_timeout: int = 5000
    transaction_timeout: int = 1000

    def __post_init__(self) -> None:
        if not self.port:
            self.port = DEFAULT_PORT
        if self.baudrate not in BaudRate.tags():
            raise FernvaleValueError(
                f"Unsupported baud rate {self.baudrate}, use one of: {', '.join(BaudRate.labels())}"
            )
        if self.sync_timeout < 0 or self.transaction_timeout < 0:
            raise FernvaleValueError("Timeouts must not be negative")


def open_serial_port(config: LinkConfig) -> Serial:
    """Open the serial device and apply the raw line discipline.

    pyserial configures the port while opening it: speed for both
    directions, 8 data bits, no parity, one stop bit, no flow control,
    no canonical processing, echo or signal generation.

    :param config: Link settings.
    :return: Opened serial port.
    :raises OpenError: The device cannot be opened (missing, permission denied, busy).
    :raises ConfigureError: The line discipline cannot be applied.
    """
    serial_port = Serial()
    try:
        serial_port.port = config.port
        serial_port.baudrate = config.baudrate
        serial_port.exclusive = True
        serial_port.timeout = 0
        serial_port.write_timeout = 0
    except (ValueError, SerialException) as exc:
        raise ConfigureError(f"{config.port}: {exc}") from exc

    try:
        serial_port.open()
    except SerialException as exc:
        # pyserial reports failures of open() and flock() with an error number
        if exc.errno is not None:
            raise OpenError(f"{config.port}: {exc}") from exc
        raise ConfigureError(f"{config.port}: {exc}") from exc
    except (ValueError, termios.error) as exc:
        raise ConfigureError(f"{config.port}: {exc}") from exc
    logger.debug(f"Opened {config.port} at {config.baudrate} Bd")
    return serial_port


def open_and_sync(config: LinkConfig) -> TransportSession:
    """Open the link, synchronize with the bridge and return an active session.

    :param config: Link settings.
    :return: Session ready for transactions.
    :raises SessionStateError: Another session is still alive.
    :raises OpenError: The device cannot be opened.
    :raises ConfigureError: The line discipline cannot be applied.
    :raises SyncTimeout: The bridge did not signal readiness in time.
    """
    active = TransportSession.get_active()
    if active is not None:
        raise SessionStateError(f"session '{active}' is still alive, shut it down first")

    serial_port = open_serial_port(config)
    try:
        session = TransportSession(
            ByteChannel(serial_port.fileno()),
            port=serial_port,
            transaction_timeout=config.transaction_timeout,
            name=config.port,
        )
    except FernvaleError:
        serial_port.close()
        raise

    try:
        discarded = session.synchronize(config.sync_timeout)
        session.activate()
    except FernvaleError:
        session.shutdown()
        raise
    logger.info(f"Synchronized with {config.port}, {discarded} boot bytes discarded")
    return session
