#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Simulated Fernvale bridge and a serial.Serial replacement backed by it.

The simulator runs the device side of the protocol in a thread on one end of
a socket pair: it waits for the greeting, emits some boot noise followed by
the ready sentinel and then serves frames against a small SPI NOR model until
it receives the shutdown frame or the host closes its end.
"""

import errno
import logging
import socket
import threading
from typing import Optional, Type

from serial import SerialException

logger = logging.getLogger(__name__)

GREETING = b"spi flashrom\n"
READY_SENTINEL = 0x05
DEFAULT_JEDEC_ID = 0xBF2541
DEFAULT_FLASH_SIZE = 0x100000
PAGE_SIZE = 256

SR_WIP = 0x01
SR_WEL = 0x02


class SpiFlashModel:
    """25-series SPI NOR flash with 3-byte addressing.

    Programming only clears bits, like on a real chip. Every program command
    leaves the chip busy for ``busy_polls`` status reads.
    """

    def __init__(
        self,
        size: int = DEFAULT_FLASH_SIZE,
        jedec_id: int = DEFAULT_JEDEC_ID,
        data: Optional[bytes] = None,
        busy_polls: int = 0,
    ) -> None:
        self.memory = bytearray(b"\xff" * size)
        if data:
            self.memory[: len(data)] = data
        self.jedec_id = jedec_id
        self.busy_polls = busy_polls
        self.write_enabled = False
        self.busy = 0
        self.aai_address: Optional[int] = None

    @property
    def status(self) -> int:
        """Status register value."""
        return (SR_WIP if self.busy else 0) | (SR_WEL if self.write_enabled else 0)

    def _program(self, address: int, data: bytes) -> None:
        for offset, value in enumerate(data):
            self.memory[(address + offset) % len(self.memory)] &= value
        self.busy = self.busy_polls

    def _read_status(self) -> int:
        status = self.status
        if self.busy:
            self.busy -= 1
        return status

    def command(self, write_bytes: bytes, read_count: int) -> bytes:
        """Execute one SPI command.

        :param write_bytes: Bytes clocked into the chip.
        :param read_count: Number of bytes clocked out of the chip.
        :return: Bytes clocked out, 0xff where the chip does not drive the line.
        """
        if not write_bytes:
            return b"\xff" * read_count
        opcode = write_bytes[0]
        address = int.from_bytes(write_bytes[1:4], "big") if len(write_bytes) >= 4 else 0
        reply = b""
        if opcode == 0x9F:
            reply = self.jedec_id.to_bytes(3, "big")
        elif opcode == 0x05:
            reply = bytes(self._read_status() for _ in range(read_count))
        elif opcode == 0x03:
            reply = bytes(self.memory[(address + i) % len(self.memory)] for i in range(read_count))
        elif opcode == 0x06:
            self.write_enabled = True
        elif opcode == 0x04:
            self.write_enabled = False
            self.aai_address = None
        elif opcode == 0x02:
            if self.write_enabled:
                page = address - address % PAGE_SIZE
                for offset, value in enumerate(write_bytes[4:]):
                    self._program(page + (address + offset) % PAGE_SIZE, bytes([value]))
                self.write_enabled = False
        elif opcode == 0xAD:
            if self.aai_address is None:
                if self.write_enabled:
                    self.aai_address = address
                    self._program(address, write_bytes[4:6])
                    self.aai_address += 2
            else:
                self._program(self.aai_address, write_bytes[1:3])
                self.aai_address += 2
        return (reply + b"\xff" * read_count)[:read_count]


class FernvaleSimulator:
    """Device side of the Fernvale serial protocol on a socket pair.

    :ivar frames: Frames served so far as (write bytes, read count) tuples.
    :ivar greeted: The greeting has been received.
    :ivar shutdown_received: The shutdown frame has been received.
    """

    def __init__(
        self,
        flash: Optional[SpiFlashModel] = None,
        boot_noise: bytes = b"Fernvale boot\r\n",
        send_ready: bool = True,
    ) -> None:
        """Create the socket pair, the simulator thread is started by :meth:`start`.

        :param flash: Flash chip model, a blank default chip when not given.
        :param boot_noise: Bytes emitted before the ready sentinel.
        :param send_ready: Emit the ready sentinel after the greeting.
        """
        self.flash = flash or SpiFlashModel()
        self.boot_noise = boot_noise
        self.send_ready = send_ready
        self.host_socket, self.device_socket = socket.socketpair()
        self.frames: list[tuple[bytes, int]] = []
        self.greeted = False
        self.shutdown_received = False
        self._thread = threading.Thread(target=self._run, name="fernvale-simulator", daemon=True)

    def start(self) -> "FernvaleSimulator":
        """Start serving the protocol."""
        self._thread.start()
        return self

    def fileno(self) -> int:
        """File descriptor of the host end."""
        return self.host_socket.fileno()

    def _recv_exact(self, length: int) -> Optional[bytes]:
        data = b""
        while len(data) < length:
            chunk = self.device_socket.recv(length - len(data))
            if not chunk:
                return None
            data += chunk
        return data

    def _serve(self) -> None:
        received = b""
        while not received.endswith(GREETING):
            chunk = self._recv_exact(1)
            if chunk is None:
                return
            received += chunk
        self.greeted = True
        self.device_socket.sendall(self.boot_noise)
        if not self.send_ready:
            # stay silent until the host gives up
            while self.device_socket.recv(64):
                pass
            return
        self.device_socket.sendall(bytes([READY_SENTINEL]))
        while True:
            header = self._recv_exact(2)
            if header is None:
                return
            out_len, in_len = header
            if out_len == 0 and in_len == 0:
                self.shutdown_received = True
                logger.debug("Simulator: shutdown frame received")
                return
            payload = self._recv_exact(out_len) if out_len else b""
            if payload is None:
                return
            self.frames.append((payload, in_len))
            reply = self.flash.command(payload, in_len)
            if reply:
                self.device_socket.sendall(reply)

    def _run(self) -> None:
        try:
            self._serve()
        except OSError as exc:
            logger.debug(f"Simulator: link lost: {exc}")
        finally:
            self.device_socket.close()

    def join(self, timeout: float = 1.0) -> None:
        """Wait for the simulator thread to finish."""
        if self._thread.is_alive():
            self._thread.join(timeout)

    def close(self) -> None:
        """Close the host end and stop the simulator."""
        self.host_socket.close()
        self.join()


class SerialProxy:
    """Replacement of serial.Serial connected to a :class:`FernvaleSimulator`.

    Every successful :meth:`open` starts a fresh simulator built from the
    arguments given to :meth:`init_proxy`; the last one is kept for inspection.

    :cvar simulator_args: Keyword arguments of the simulators.
    :cvar available: The simulated device is present.
    :cvar last_simulator: Simulator of the most recently opened port.
    """

    simulator_args: dict = {}
    available: bool = True
    last_simulator: Optional[FernvaleSimulator] = None

    @classmethod
    def init_proxy(cls, available: bool = True, **simulator_args: object) -> "Type[SerialProxy]":
        """Configure the simulated device.

        :param available: When False, opening the port fails as if the device was missing.
        :param simulator_args: Keyword arguments of :class:`FernvaleSimulator`.
        :return: SerialProxy class ready to be patched over serial.Serial.
        """
        cls.available = available
        cls.simulator_args = simulator_args
        cls.last_simulator = None
        return cls

    def __init__(self, port: Optional[str] = None, baudrate: int = 9600, **kwargs: object) -> None:
        self.port = port
        self.baudrate = baudrate
        self.exclusive = kwargs.get("exclusive")
        self.timeout = kwargs.get("timeout")
        self.write_timeout = kwargs.get("write_timeout")
        self.is_open = False
        self.simulator: Optional[FernvaleSimulator] = None

    def open(self) -> None:
        """Simulate opening the serial port.

        :raises SerialException: The simulated device is not available.
        """
        if not self.available:
            raise SerialException(
                errno.ENOENT, f"could not open port {self.port}: No such file or directory"
            )
        self.simulator = FernvaleSimulator(**self.simulator_args).start()  # type: ignore[arg-type]
        SerialProxy.last_simulator = self.simulator
        self.is_open = True

    def fileno(self) -> int:
        """File descriptor of the simulated link."""
        if self.simulator is None:
            raise SerialException("Port is not open")
        return self.simulator.fileno()

    def close(self) -> None:
        """Simulate closing the serial port."""
        if self.simulator is not None:
            self.simulator.close()
        self.is_open = False

    def __str__(self) -> str:
        return self.__class__.__name__
