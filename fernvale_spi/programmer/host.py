#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Programmer host: the registry a transport hooks itself into."""

import logging
from typing import Callable, Optional, Sequence

from fernvale_spi.exceptions import FernvaleError
from fernvale_spi.programmer.master import ProgressCallback, SpiMaster
from fernvale_spi.transport.framer import SpiTransaction

logger = logging.getLogger(__name__)


class ShutdownRegistry:
    """Callbacks run once when the host shuts down, most recent first."""

    MAX_CALLBACKS = 32

    def __init__(self) -> None:
        self._callbacks: list[tuple[str, Callable[[], None]]] = []

    def register(self, callback: Callable[[], None], name: Optional[str] = None) -> None:
        """Register a shutdown callback.

        :param callback: Callable without arguments.
        :param name: Name used in log messages.
        :raises FernvaleError: Too many callbacks registered.
        """
        if len(self._callbacks) >= self.MAX_CALLBACKS:
            raise FernvaleError(f"Too many shutdown callbacks, at most {self.MAX_CALLBACKS} allowed")
        self._callbacks.append((name or getattr(callback, "__qualname__", repr(callback)), callback))

    def run(self) -> None:
        """Run and forget all registered callbacks in reverse order.

        A failing callback is logged and does not stop the others.
        """
        while self._callbacks:
            name, callback = self._callbacks.pop()
            logger.debug(f"Running shutdown callback {name}")
            try:
                callback()
            except Exception as exc:  # pylint: disable=broad-except
                logger.error(f"Shutdown callback {name} failed: {exc}")

    def __len__(self) -> int:
        return len(self._callbacks)


class ProgrammerHost:
    """Holds the registered SPI master and dispatches flash operations to it."""

    def __init__(self) -> None:
        self.spi_master: Optional[SpiMaster] = None
        self.shutdown_registry = ShutdownRegistry()

    def register_spi_master(self, master: SpiMaster) -> None:
        """Register the SPI master of the programmer.

        :param master: Capability descriptor of the transport.
        :raises FernvaleError: A master is already registered.
        """
        if self.spi_master is not None:
            raise FernvaleError(f"SPI master {self.spi_master.identifier} is already registered")
        logger.debug(f"Registered SPI master {master}")
        self.spi_master = master

    def register_shutdown(self, callback: Callable[[], None], name: Optional[str] = None) -> None:
        """Register a callback run on host shutdown."""
        self.shutdown_registry.register(callback, name)

    @property
    def master(self) -> SpiMaster:
        """Registered SPI master.

        :raises FernvaleError: No programmer has been initialized.
        """
        if self.spi_master is None:
            raise FernvaleError("No SPI master registered, initialize a programmer first")
        return self.spi_master

    def send_command(self, write_bytes: bytes, read_count: int) -> bytes:
        """Execute one SPI command on the registered master."""
        return self.master.send_command(write_bytes, read_count)

    def multicommand(self, transactions: Sequence[SpiTransaction]) -> list[SpiTransaction]:
        """Execute a batch of SPI commands on the registered master."""
        return self.master.multicommand(self.master, transactions)

    def read(self, start: int, length: int, progress_callback: ProgressCallback = None) -> bytes:
        """Read flash contents through the registered master."""
        return self.master.read(self.master, start, length, progress_callback)

    def write_256(self, start: int, data: bytes, progress_callback: ProgressCallback = None) -> None:
        """Page program flash through the registered master."""
        self.master.write_256(self.master, start, data, progress_callback)

    def write_aai(self, start: int, data: bytes, progress_callback: ProgressCallback = None) -> None:
        """AAI program flash through the registered master."""
        self.master.write_aai(self.master, start, data, progress_callback)

    def shutdown(self) -> None:
        """Run the shutdown callbacks and forget the SPI master."""
        self.shutdown_registry.run()
        self.spi_master = None

    def __enter__(self) -> "ProgrammerHost":
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()
