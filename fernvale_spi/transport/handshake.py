#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Synchronization handshake with the Fernvale bridge.

The bridge may print an arbitrary amount of boot diagnostics before it is
ready. The host sends a greeting that selects the SPI bridge mode and then
discards every byte until the ready sentinel is consumed.
"""

import logging
from typing import Optional

from fernvale_spi.exceptions import SyncTimeout, TransportTimeout
from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.utils.misc import Timeout

logger = logging.getLogger(__name__)

GREETING = b"spi flashrom\n"
READY_SENTINEL = 0x05


def send_greeting(channel: ByteChannel, timeout: Optional[Timeout] = None) -> None:
    """Send the command selecting the SPI bridge mode.

    :param channel: Channel of the serial link.
    :param timeout: Deadline of the write.
    """
    logger.debug(f"Sending greeting {GREETING!r}")
    channel.write_all(GREETING, timeout)


def wait_for_sentinel(channel: ByteChannel, timeout: Optional[Timeout] = None) -> int:
    """Discard incoming bytes until the ready sentinel is consumed.

    Nothing after the sentinel is read.

    :param channel: Channel of the serial link.
    :param timeout: Deadline of the whole discard loop, None waits forever.
    :return: Number of bytes discarded before the sentinel.
    :raises SyncTimeout: The sentinel did not arrive before the deadline.
    """
    discarded = 0
    while True:
        try:
            value = channel.read_byte(timeout)
        except TransportTimeout as exc:
            raise SyncTimeout(
                f"ready signal 0x{READY_SENTINEL:02x} not received within {timeout}, "
                f"{discarded} bytes discarded",
                discarded=discarded,
            ) from exc
        if value == READY_SENTINEL:
            break
        discarded += 1
    logger.debug(f"Found 'ready' signal after {discarded + 1} bytes")
    return discarded


def synchronize(channel: ByteChannel, timeout: Optional[Timeout] = None) -> int:
    """Perform the whole handshake: greeting followed by the sentinel wait.

    :param channel: Channel of the serial link.
    :param timeout: Deadline covering both steps, None waits forever.
    :return: Number of boot bytes discarded before the sentinel.
    :raises SyncTimeout: The handshake did not finish before the deadline.
    """
    try:
        send_greeting(channel, timeout)
    except TransportTimeout as exc:
        raise SyncTimeout(f"greeting could not be sent within {timeout}") from exc
    return wait_for_sentinel(channel, timeout)
