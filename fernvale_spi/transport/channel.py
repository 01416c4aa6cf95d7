#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Reliable byte channel over a raw serial file descriptor.

The channel guarantees that a requested number of bytes is fully written or
fully read before returning. Transient "temporarily unavailable" conditions
are retried, a zero-byte transfer is reported as a closed channel and any
other operating system failure is surfaced with its error number.
"""

import logging
import os
import select
from typing import Optional

from fernvale_spi.exceptions import ChannelClosed, TransportIOError, TransportTimeout
from fernvale_spi.utils.misc import Timeout, format_bytes

logger = logging.getLogger(__name__)


class ByteChannel:
    """All-or-nothing reads and writes on a file descriptor.

    The descriptor is switched to non-blocking mode so that every wait for
    readiness can be bounded by a deadline. Reads are done one byte at a
    time, so the channel never consumes bytes past a frame boundary.
    """

    def __init__(self, fd: int) -> None:
        """Initialize the channel.

        :param fd: Open file descriptor of the serial link, the channel does not own it.
        """
        self._fd = fd
        os.set_blocking(fd, False)

    @property
    def fd(self) -> int:
        """File descriptor used by the channel."""
        return self._fd

    def _wait(self, writing: bool, timeout: Optional[Timeout], transferred: int) -> None:
        """Wait until the descriptor is ready for the next transfer attempt.

        :param writing: Wait for writability instead of readability.
        :param timeout: Deadline of the whole transfer, None waits forever.
        :param transferred: Bytes already moved, reported on timeout.
        :raises TransportTimeout: The deadline expired before the descriptor got ready.
        """
        rest = timeout.get_rest_time() if timeout else None
        fds = [self._fd]
        readable, writable, _ = select.select(
            [] if writing else fds, fds if writing else [], [], rest
        )
        if not readable and not writable:
            direction = "write" if writing else "read"
            raise TransportTimeout(
                f"no progress within {timeout} while waiting to {direction} "
                f"({transferred} bytes transferred)",
                transferred=transferred,
            )

    def write_all(self, data: bytes, timeout: Optional[Timeout] = None) -> int:
        """Write the whole buffer to the channel.

        :param data: Bytes to send.
        :param timeout: Deadline for the whole write, None waits forever.
        :return: Number of bytes written, always ``len(data)``.
        :raises ChannelClosed: The peer closed the link.
        :raises TransportTimeout: The deadline expired.
        :raises TransportIOError: Any other failure of the underlying write.
        """
        view = memoryview(bytes(data))
        sent = 0
        while sent < len(view):
            try:
                ret = os.write(self._fd, view[sent:])
            except (BlockingIOError, InterruptedError):
                self._wait(True, timeout, sent)
                continue
            except (BrokenPipeError, ConnectionResetError) as exc:
                raise ChannelClosed(
                    f"write failed after {sent} of {len(view)} bytes: {exc}", transferred=sent
                ) from exc
            except OSError as exc:
                raise TransportIOError(
                    f"write failed after {sent} of {len(view)} bytes: {exc}",
                    errno=exc.errno,
                    transferred=sent,
                ) from exc
            # FD closed
            if not ret:
                raise ChannelClosed(
                    f"peer closed the link after {sent} of {len(view)} bytes", transferred=sent
                )
            sent += ret
        logger.debug(f"->WRITE({sent}): [{format_bytes(view)}]")
        return sent

    def read_all(self, length: int, timeout: Optional[Timeout] = None) -> bytes:
        """Read exactly ``length`` bytes from the channel, one byte at a time.

        :param length: Number of bytes to read.
        :param timeout: Deadline for the whole read, None waits forever.
        :return: The bytes read.
        :raises ChannelClosed: The peer closed the link.
        :raises TransportTimeout: The deadline expired.
        :raises TransportIOError: Any other failure of the underlying read.
        """
        data = bytearray()
        while len(data) < length:
            # deadline holds even while bytes keep arriving
            if timeout and timeout.overflow():
                logger.debug(f"<-READ({len(data)}/{length}): <{format_bytes(data)}>")
                raise TransportTimeout(
                    f"deadline {timeout} expired while reading "
                    f"({len(data)} of {length} bytes transferred)",
                    transferred=len(data),
                )
            try:
                chunk = os.read(self._fd, 1)
            except (BlockingIOError, InterruptedError):
                try:
                    self._wait(False, timeout, len(data))
                except TransportTimeout:
                    logger.debug(f"<-READ({len(data)}/{length}): <{format_bytes(data)}>")
                    raise
                continue
            except ConnectionResetError as exc:
                raise ChannelClosed(
                    f"read failed after {len(data)} of {length} bytes: {exc}",
                    transferred=len(data),
                ) from exc
            except OSError as exc:
                raise TransportIOError(
                    f"read failed after {len(data)} of {length} bytes: {exc}",
                    errno=exc.errno,
                    transferred=len(data),
                ) from exc
            # FD closed
            if not chunk:
                logger.debug(f"<-READ({len(data)}/{length}): <{format_bytes(data)}>")
                raise ChannelClosed(
                    f"peer closed the link after {len(data)} of {length} bytes",
                    transferred=len(data),
                )
            data += chunk
        logger.debug(f"<-READ({length}): <{format_bytes(data)}>")
        return bytes(data)

    def read_byte(self, timeout: Optional[Timeout] = None) -> int:
        """Read a single byte from the channel.

        :param timeout: Deadline for the read, None waits forever.
        :return: Value of the byte read.
        """
        return self.read_all(1, timeout)[0]

    def __str__(self) -> str:
        return f"ByteChannel(fd={self._fd})"
