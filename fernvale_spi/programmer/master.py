#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""SPI master capability descriptor advertised to the programmer host."""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from fernvale_spi.programmer import spi
from fernvale_spi.transport.framer import SpiTransaction

ProgressCallback = Optional[Callable[[int, int], None]]


@dataclass(frozen=True)
class SpiMaster:
    """Size limits and operations of one SPI transport.

    A transport supplies only ``command``. The bulk operations default to the
    generic implementations of :mod:`fernvale_spi.programmer.spi`, which are
    built purely from repeated ``command`` calls; each receives the master as
    its first argument.
    """

    identifier: str
    max_data_read: int
    max_data_write: int
    command: Callable[[bytes, int], bytes]
    multicommand: Callable[
        ["SpiMaster", Sequence[SpiTransaction]], list[SpiTransaction]
    ] = spi.default_spi_send_multicommand
    read: Callable[["SpiMaster", int, int, ProgressCallback], bytes] = spi.default_spi_read
    write_256: Callable[
        ["SpiMaster", int, bytes, ProgressCallback], None
    ] = spi.default_spi_write_256
    write_aai: Callable[
        ["SpiMaster", int, bytes, ProgressCallback], None
    ] = spi.default_spi_write_aai

    def send_command(self, write_bytes: bytes, read_count: int) -> bytes:
        """Execute a single SPI command on the transport.

        :param write_bytes: Bytes to clock out.
        :param read_count: Number of bytes to clock in.
        :return: Bytes clocked in.
        """
        return self.command(write_bytes, read_count)

    def __str__(self) -> str:
        return (
            f"{self.identifier} (max read {self.max_data_read} B, "
            f"max write {self.max_data_write} B)"
        )
