#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Fernvale SPI pytest configuration and shared test fixtures."""

import os
import socket
from typing import Iterator
from unittest.mock import patch

import pytest

os.environ["FERNVALE_DEBUG_LOGGING_DISABLED"] = "True"

# pylint: disable=wrong-import-position
from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.transport.session import TransportSession
from fernvale_spi.utils.serial_proxy import SerialProxy
from tests.cli_runner import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Get CLI runner instance for testing."""
    return CliRunner()


@pytest.fixture
def sockets() -> Iterator[tuple[socket.socket, socket.socket]]:
    """Connected (host, device) socket pair standing in for the serial link."""
    host, device = socket.socketpair()
    try:
        yield host, device
    finally:
        host.close()
        device.close()


@pytest.fixture
def channel(sockets: tuple[socket.socket, socket.socket]) -> ByteChannel:
    """Byte channel on the host end of the socket pair."""
    return ByteChannel(sockets[0].fileno())


@pytest.fixture
def device(sockets: tuple[socket.socket, socket.socket]) -> socket.socket:
    """Device end of the socket pair."""
    sockets[1].settimeout(1)
    return sockets[1]


@pytest.fixture(autouse=True)
def release_session() -> Iterator[None]:
    """Make sure no session outlives a test."""
    yield
    active = TransportSession.get_active()
    if active is not None:
        active.shutdown()
    TransportSession._active = None  # pylint: disable=protected-access


@pytest.fixture
def simulated_serial() -> Iterator[type[SerialProxy]]:
    """Replace serial.Serial used by the link initializer with the simulated bridge."""
    proxy = SerialProxy.init_proxy()
    with patch("fernvale_spi.transport.link.Serial", proxy):
        yield proxy
