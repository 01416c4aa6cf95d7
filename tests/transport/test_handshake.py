#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the synchronization handshake."""

import socket
import threading
import time

import pytest

from fernvale_spi.exceptions import ChannelClosed, SyncTimeout, TransportTimeout
from fernvale_spi.transport import handshake
from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.utils.misc import Timeout


def test_greeting_bytes(channel: ByteChannel, device: socket.socket) -> None:
    handshake.send_greeting(channel, Timeout(1000))
    assert device.recv(64) == b"spi flashrom\n"


@pytest.mark.parametrize(
    "boot_noise",
    [b"", b"\x00", b"U-Boot 2011\r\n\xff\xfe", bytes(range(6, 200)), b"\xaa" * 10000],
)
def test_synchronize_discards_boot_noise(
    channel: ByteChannel, device: socket.socket, boot_noise: bytes
) -> None:
    device.sendall(boot_noise + b"\x05\x42")
    assert handshake.synchronize(channel, Timeout(1000)) == len(boot_noise)
    assert device.recv(64) == handshake.GREETING
    # nothing after the sentinel is consumed
    assert channel.read_byte(Timeout(1000)) == 0x42


def test_first_sentinel_ends_the_handshake(channel: ByteChannel, device: socket.socket) -> None:
    device.sendall(b"ab\x05\x05")
    assert handshake.wait_for_sentinel(channel, Timeout(1000)) == 2
    assert channel.read_byte(Timeout(1000)) == 0x05


def test_sync_timeout(channel: ByteChannel, device: socket.socket) -> None:
    device.sendall(b"booting...")
    with pytest.raises(SyncTimeout) as exc_info:
        handshake.synchronize(channel, Timeout(100))
    assert exc_info.value.discarded == len(b"booting...")
    assert isinstance(exc_info.value, TransportTimeout)


def test_sync_peer_closed(channel: ByteChannel, device: socket.socket) -> None:
    device.sendall(b"xx")
    device.shutdown(socket.SHUT_WR)
    with pytest.raises(ChannelClosed):
        handshake.wait_for_sentinel(channel, Timeout(1000))


def test_sync_timeout_while_device_keeps_sending(
    channel: ByteChannel, device: socket.socket
) -> None:
    """A device streaming garbage without the sentinel still times out.

    :param channel: Host side channel.
    :param device: Device end of the link.
    """
    stop = threading.Event()
    device.setblocking(False)

    def flood() -> None:
        while not stop.is_set():
            try:
                device.send(b"\xaa" * 256)
            except BlockingIOError:
                time.sleep(0.001)

    sender = threading.Thread(target=flood, daemon=True)
    sender.start()
    start = time.monotonic()
    try:
        with pytest.raises(SyncTimeout) as exc_info:
            handshake.wait_for_sentinel(channel, Timeout(100))
    finally:
        stop.set()
        sender.join(1)
    assert time.monotonic() - start < 1
    assert exc_info.value.discarded > 0
