#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Serial transport of the Fernvale SPI bridge.

The package is layered bottom-up: reliable byte channel, handshake and link
initialization, command framing and the session owning the link.
"""

from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.transport.framer import CommandFramer, SpiTransaction, encode_frame
from fernvale_spi.transport.link import BaudRate, LinkConfig, open_and_sync, open_serial_port
from fernvale_spi.transport.session import SessionState, TransportSession

__all__ = [
    "BaudRate",
    "ByteChannel",
    "CommandFramer",
    "LinkConfig",
    "SessionState",
    "SpiTransaction",
    "TransportSession",
    "encode_frame",
    "open_and_sync",
    "open_serial_port",
]
