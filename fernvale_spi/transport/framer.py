#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""SPI transaction framing for the Fernvale serial protocol.

Frame layout::

    +---------+--------+-------------------+
    | out_len | in_len |      payload      |
    | 1 byte  | 1 byte |  out_len bytes    |
    +---------+--------+-------------------+

The bridge answers with exactly ``in_len`` raw bytes. There is no
acknowledgment, checksum or separator: frame boundaries exist only by byte
count agreement between both ends.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from fernvale_spi.exceptions import FernvaleTransportError, ShortTransfer, TransactionError
from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.utils.misc import Timeout, format_bytes

logger = logging.getLogger(__name__)

HEADER_SIZE = 2
MAX_COUNT = 0xFF


@dataclass(frozen=True)
class SpiTransaction:
    """One SPI transaction: bytes to clock out and number of bytes to clock in.

    ``read_bytes`` stays None until the transaction is executed.
    """

    write_bytes: bytes = b""
    read_count: int = 0
    read_bytes: Optional[bytes] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "write_bytes", bytes(self.write_bytes))
        if len(self.write_bytes) > MAX_COUNT:
            raise TransactionError(
                f"Write count {len(self.write_bytes)} does not fit into the frame header"
            )
        if not 0 <= self.read_count <= MAX_COUNT:
            raise TransactionError(f"Read count {self.read_count} does not fit into the frame header")
        if self.read_bytes is not None and len(self.read_bytes) != self.read_count:
            raise TransactionError(
                f"Expected {self.read_count} read bytes, got {len(self.read_bytes)}"
            )

    @property
    def write_count(self) -> int:
        """Number of bytes clocked out to the flash chip."""
        return len(self.write_bytes)

    @property
    def completed(self) -> bool:
        """The transaction has been executed and holds its reply."""
        return self.read_bytes is not None

    def __repr__(self) -> str:
        return (
            f"SpiTransaction(write=[{format_bytes(self.write_bytes)}], "
            f"read_count={self.read_count}"
            + (f", read=[{format_bytes(self.read_bytes)}])" if self.read_bytes is not None else ")")
        )


def encode_frame(transaction: SpiTransaction) -> bytes:
    """Encode a transaction into its wire frame.

    :param transaction: Transaction to encode.
    :return: Header followed by the outgoing payload.
    """
    return bytes([transaction.write_count, transaction.read_count]) + transaction.write_bytes


class CommandFramer:
    """Executes SPI transactions as frames over a byte channel.

    The framer keeps no state between transactions. Only one transaction may
    be in flight on a channel at any time; this class does not enforce it,
    :class:`~fernvale_spi.transport.session.TransportSession` does.
    """

    def __init__(self, channel: ByteChannel) -> None:
        """Initialize the framer.

        :param channel: Channel of an already synchronized link.
        """
        self.channel = channel

    def execute(
        self, transaction: SpiTransaction, timeout: Optional[Timeout] = None
    ) -> SpiTransaction:
        """Send one transaction and read back its reply.

        :param transaction: Transaction to execute.
        :param timeout: Deadline of the whole frame, None waits forever.
        :return: Copy of the transaction with ``read_bytes`` filled in.
        :raises ShortTransfer: A phase moved some, but not all, of its bytes.
        :raises ChannelClosed: The peer closed the link before the phase started.
        :raises TransportTimeout: The deadline expired before the phase started.
        :raises TransportIOError: Any other transport failure.
        """
        frame = encode_frame(transaction)
        try:
            self.channel.write_all(frame, timeout)
        except FernvaleTransportError as exc:
            if exc.transferred == 0:
                raise
            if exc.transferred < HEADER_SIZE:
                raise ShortTransfer("header", HEADER_SIZE, exc.transferred) from exc
            raise ShortTransfer(
                "payload", transaction.write_count, exc.transferred - HEADER_SIZE
            ) from exc

        try:
            reply = self.channel.read_all(transaction.read_count, timeout)
        except FernvaleTransportError as exc:
            if exc.transferred == 0:
                raise
            raise ShortTransfer("reply", transaction.read_count, exc.transferred) from exc

        logger.debug(
            f"SPI: wrote {transaction.write_count} bytes [{format_bytes(transaction.write_bytes)}], "
            f"read {len(reply)} bytes [{format_bytes(reply)}]"
        )
        return replace(transaction, read_bytes=reply)
