#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the generic SPI flash operations."""

from typing import Callable
from unittest.mock import MagicMock

import pytest

from fernvale_spi.exceptions import FernvaleTimeoutError, FernvaleValueError
from fernvale_spi.programmer import spi
from fernvale_spi.programmer.master import SpiMaster
from fernvale_spi.transport.framer import SpiTransaction
from fernvale_spi.utils.serial_proxy import SpiFlashModel


class RecordingFlash(SpiFlashModel):
    """Flash model remembering every command it executed."""

    def __init__(self, **kwargs: int) -> None:
        super().__init__(size=0x10000, **kwargs)
        self.commands: list[tuple[bytes, int]] = []

    def command(self, write_bytes: bytes, read_count: int) -> bytes:
        self.commands.append((write_bytes, read_count))
        return super().command(write_bytes, read_count)

    def opcodes(self) -> list[int]:
        return [cmd[0][0] for cmd in self.commands]


@pytest.fixture
def flash() -> RecordingFlash:
    return RecordingFlash()


@pytest.fixture
def make_master(flash: RecordingFlash) -> Callable[..., SpiMaster]:
    def _make(max_data_read: int = 128, max_data_write: int = 128) -> SpiMaster:
        return SpiMaster("test", max_data_read, max_data_write, flash.command)

    return _make


def test_read_jedec_id(make_master: Callable[..., SpiMaster]) -> None:
    assert spi.spi_read_jedec_id(make_master()) == 0xBF2541


def test_read_status(flash: RecordingFlash, make_master: Callable[..., SpiMaster]) -> None:
    master = make_master()
    assert spi.spi_read_status(master) == 0
    spi.spi_write_enable(master)
    assert spi.spi_read_status(master) == 0x02
    spi.spi_write_disable(master)
    assert spi.spi_read_status(master) == 0


def test_multicommand(make_master: Callable[..., SpiMaster]) -> None:
    master = make_master()
    results = master.multicommand(
        master, [SpiTransaction(b"\x9f", 3), SpiTransaction(b"\x06"), SpiTransaction(b"\x05", 1)]
    )
    assert [r.read_bytes for r in results] == [b"\xbf\x25\x41", b"", b"\x02"]


def test_read_is_chunked(flash: RecordingFlash, make_master: Callable[..., SpiMaster]) -> None:
    flash.memory[0x100:0x200] = bytes(range(256))
    progress = MagicMock()
    data = spi.default_spi_read(make_master(max_data_read=100), 0x100, 256, progress)
    assert data == bytes(range(256))
    assert flash.commands == [
        (b"\x03\x00\x01\x00", 100),
        (b"\x03\x00\x01\x64", 100),
        (b"\x03\x00\x01\xc8", 56),
    ]
    assert progress.call_args_list[-1].args == (256, 256)


def test_read_out_of_range(make_master: Callable[..., SpiMaster]) -> None:
    with pytest.raises(FernvaleValueError):
        spi.default_spi_read(make_master(), 0xFFFFFF, 2)


def test_write_256_respects_pages(
    flash: RecordingFlash, make_master: Callable[..., SpiMaster]
) -> None:
    data = bytes(i & 0xFF for i in range(300))
    spi.default_spi_write_256(make_master(), 0xF0, data)
    assert flash.memory[0xF0 : 0xF0 + 300] == data
    programs = [cmd for cmd in flash.commands if cmd[0][0] == spi.JEDEC_BYTE_PROGRAM]
    # 16 bytes up to the page boundary, then chunks limited by the command size
    assert [len(cmd[0]) - 4 for cmd in programs] == [16, 124, 124, 8, 28]
    assert all(len(cmd[0]) <= 128 for cmd in programs)
    assert flash.opcodes()[:3] == [spi.JEDEC_WREN, spi.JEDEC_BYTE_PROGRAM, spi.JEDEC_RDSR]


def test_write_256_waits_for_ready() -> None:
    busy_flash = RecordingFlash(busy_polls=3)
    master = SpiMaster("test", 128, 128, busy_flash.command)
    spi.default_spi_write_256(master, 0, b"\x12\x34")
    assert busy_flash.opcodes().count(spi.JEDEC_RDSR) == 4
    assert busy_flash.memory[:2] == b"\x12\x34"


def test_write_256_needs_payload_room(make_master: Callable[..., SpiMaster]) -> None:
    with pytest.raises(FernvaleValueError):
        spi.default_spi_write_256(make_master(max_data_write=4), 0, b"\x00")


def test_wait_ready_timeout() -> None:
    master = SpiMaster("test", 128, 128, lambda write_bytes, read_count: b"\x01" * read_count)
    with pytest.raises(FernvaleTimeoutError):
        spi.spi_wait_ready(master, timeout=20)


@pytest.mark.parametrize("start,length", [(0x10, 8), (0x11, 8), (0x10, 7), (0x11, 1), (0x11, 2)])
def test_write_aai(
    flash: RecordingFlash, make_master: Callable[..., SpiMaster], start: int, length: int
) -> None:
    data = bytes(range(0x40, 0x40 + length))
    progress = MagicMock()
    spi.default_spi_write_aai(make_master(), start, data, progress)
    assert flash.memory[start : start + length] == data
    assert flash.memory[start - 1] == 0xFF
    assert flash.memory[start + length] == 0xFF
    assert not flash.write_enabled
    assert flash.aai_address is None
    progress.assert_called_with(length, length)


def test_write_aai_command_sequence(
    flash: RecordingFlash, make_master: Callable[..., SpiMaster]
) -> None:
    spi.default_spi_write_aai(make_master(), 0x20, b"\x01\x02\x03\x04")
    aai = [cmd[0] for cmd in flash.commands if cmd[0][0] == spi.JEDEC_AAI_WORD_PROGRAM]
    assert aai == [b"\xad\x00\x00\x20\x01\x02", b"\xad\x03\x04"]
    assert spi.JEDEC_WRDI in flash.opcodes()


def test_write_aai_empty(flash: RecordingFlash, make_master: Callable[..., SpiMaster]) -> None:
    spi.default_spi_write_aai(make_master(), 0, b"")
    assert not flash.commands
