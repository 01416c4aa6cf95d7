#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Generic SPI operations built on a single-command primitive.

These are the host-side fallbacks used by transports which implement only
one SPI command at a time: batching, chunked reads, page writes and AAI
word programming of 25-series SPI NOR flash with 3-byte addressing.
"""

import logging
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from fernvale_spi.exceptions import FernvaleTimeoutError, FernvaleValueError
from fernvale_spi.transport.framer import SpiTransaction
from fernvale_spi.utils.misc import Timeout

if TYPE_CHECKING:
    from fernvale_spi.programmer.master import SpiMaster

logger = logging.getLogger(__name__)

JEDEC_RDID = 0x9F
JEDEC_RDID_INSIZE = 3
JEDEC_READ = 0x03
JEDEC_WREN = 0x06
JEDEC_WRDI = 0x04
JEDEC_RDSR = 0x05
JEDEC_BYTE_PROGRAM = 0x02
JEDEC_AAI_WORD_PROGRAM = 0xAD

SPI_SR_WIP = 0x01

ADDRESS_SIZE = 3
ADDRESS_LIMIT = 1 << (8 * ADDRESS_SIZE)
PAGE_SIZE = 256
WAIT_READY_TIMEOUT = 1000
WAIT_READY_POLL = 0.001


def _address(address: int) -> bytes:
    return address.to_bytes(ADDRESS_SIZE, "big")


def _check_range(start: int, length: int) -> None:
    if start < 0 or length < 0 or start + length > ADDRESS_LIMIT:
        raise FernvaleValueError(
            f"Range 0x{start:x}+0x{length:x} is outside of the 24-bit address space"
        )


def spi_read_jedec_id(master: "SpiMaster") -> int:
    """Read the JEDEC manufacturer and device ID.

    :param master: SPI master to use.
    :return: Manufacturer ID in bits 16-23, device ID in bits 0-15.
    """
    return int.from_bytes(master.send_command(bytes([JEDEC_RDID]), JEDEC_RDID_INSIZE), "big")


def spi_read_status(master: "SpiMaster") -> int:
    """Read the status register.

    :param master: SPI master to use.
    :return: Value of the status register.
    """
    return master.send_command(bytes([JEDEC_RDSR]), 1)[0]


def spi_write_enable(master: "SpiMaster") -> None:
    """Set the write enable latch."""
    master.send_command(bytes([JEDEC_WREN]), 0)


def spi_write_disable(master: "SpiMaster") -> None:
    """Clear the write enable latch."""
    master.send_command(bytes([JEDEC_WRDI]), 0)


def spi_wait_ready(master: "SpiMaster", timeout: int = WAIT_READY_TIMEOUT) -> None:
    """Poll the status register until the write-in-progress bit clears.

    :param master: SPI master to use.
    :param timeout: Deadline in milliseconds.
    :raises FernvaleTimeoutError: The chip is still busy after the deadline.
    """
    deadline = Timeout(timeout)
    while spi_read_status(master) & SPI_SR_WIP:
        if deadline.overflow():
            raise FernvaleTimeoutError(f"Flash chip still busy after {timeout} ms")
        time.sleep(WAIT_READY_POLL)


def default_spi_send_multicommand(
    master: "SpiMaster", transactions: Sequence[SpiTransaction]
) -> list[SpiTransaction]:
    """Execute a batch of transactions one by one.

    :param master: SPI master to use.
    :param transactions: Transactions to execute in order.
    :return: Completed transactions.
    """
    return [
        replace(trans, read_bytes=master.send_command(trans.write_bytes, trans.read_count))
        for trans in transactions
    ]


def default_spi_read(
    master: "SpiMaster",
    start: int,
    length: int,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> bytes:
    """Read flash contents with READ commands no larger than the master allows.

    :param master: SPI master to use.
    :param start: Start address.
    :param length: Number of bytes to read.
    :param progress_callback: Called with (bytes done, bytes total) after every chunk.
    :return: Data read.
    """
    _check_range(start, length)
    data = bytearray()
    while len(data) < length:
        size = min(master.max_data_read, length - len(data))
        cmd = bytes([JEDEC_READ]) + _address(start + len(data))
        data += master.send_command(cmd, size)
        if progress_callback:
            progress_callback(len(data), length)
    return bytes(data)


def default_spi_write_256(
    master: "SpiMaster",
    start: int,
    data: bytes,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Write data with PAGE PROGRAM commands.

    Chunks never cross a page boundary and fit into a single command of the
    master together with the opcode and address.

    :param master: SPI master to use.
    :param start: Start address.
    :param data: Data to program, the area must be erased.
    :param progress_callback: Called with (bytes done, bytes total) after every chunk.
    :raises FernvaleValueError: The master cannot carry any payload in a command.
    """
    _check_range(start, len(data))
    chunk_limit = master.max_data_write - 1 - ADDRESS_SIZE
    if chunk_limit <= 0:
        raise FernvaleValueError(f"{master.identifier} cannot carry a PAGE PROGRAM payload")
    offset = 0
    while offset < len(data):
        address = start + offset
        size = min(chunk_limit, PAGE_SIZE - address % PAGE_SIZE, len(data) - offset)
        spi_write_enable(master)
        cmd = bytes([JEDEC_BYTE_PROGRAM]) + _address(address) + data[offset : offset + size]
        master.send_command(cmd, 0)
        spi_wait_ready(master)
        offset += size
        if progress_callback:
            progress_callback(offset, len(data))


def default_spi_write_aai(
    master: "SpiMaster",
    start: int,
    data: bytes,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> None:
    """Write data with AAI word programming.

    AAI works on 16-bit words, so an odd leading or trailing byte is written
    with a regular byte program.

    :param master: SPI master to use.
    :param start: Start address.
    :param data: Data to program, the area must be erased.
    :param progress_callback: Called with (bytes done, bytes total) after every word.
    """
    _check_range(start, len(data))
    if not data:
        return
    head = start % 2
    tail = (len(data) - head) % 2
    words = data[head : len(data) - tail]
    if head:
        default_spi_write_256(master, start, data[:1])
    if words:
        spi_write_enable(master)
        master.send_command(
            bytes([JEDEC_AAI_WORD_PROGRAM]) + _address(start + head) + words[:2], 0
        )
        spi_wait_ready(master)
        for pos in range(2, len(words), 2):
            master.send_command(bytes([JEDEC_AAI_WORD_PROGRAM]) + words[pos : pos + 2], 0)
            spi_wait_ready(master)
            if progress_callback:
                progress_callback(head + pos + 2, len(data))
        spi_write_disable(master)
        spi_wait_ready(master)
    if tail:
        default_spi_write_256(master, start + len(data) - 1, data[-1:])
    if progress_callback:
        progress_callback(len(data), len(data))
