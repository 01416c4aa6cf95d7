#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Transport session owning the serial link to the Fernvale bridge.

Lifecycle::

    CONFIGURED --synchronize()--> SYNCED --activate()--> ACTIVE --shutdown()--> SHUT_DOWN
                                                           |
                                                  transport failure
                                                           v
                                                        FAULTED --shutdown()--> SHUT_DOWN

Integrators note: the wire protocol has no transaction identifiers, so at
most one transaction may be in flight per session. The session rejects a
concurrent call with :class:`~fernvale_spi.exceptions.ContentionError`
instead of queueing it; callers sharing a session between threads must
serialize access themselves.
"""

import logging
import threading
from typing import ClassVar, Optional, Protocol

from fernvale_spi.exceptions import (
    ContentionError,
    FernvaleTransportError,
    SessionStateError,
    TransactionError,
)
from fernvale_spi.transport import handshake
from fernvale_spi.transport.channel import ByteChannel
from fernvale_spi.transport.framer import CommandFramer, SpiTransaction
from fernvale_spi.utils.fernvale_enum import FernvaleEnum
from fernvale_spi.utils.misc import Timeout

logger = logging.getLogger(__name__)


class Closeable(Protocol):
    """Anything owning the link resources, typically a ``serial.Serial`` instance."""

    def close(self) -> None:
        """Release the resources."""


class SessionState(FernvaleEnum):
    """Lifecycle states of a transport session."""

    CONFIGURED = (1, "CONFIGURED", "Serial port opened and line discipline applied")
    SYNCED = (2, "SYNCED", "Ready sentinel received from the bridge")
    ACTIVE = (3, "ACTIVE", "SPI transactions are accepted")
    FAULTED = (4, "FAULTED", "Frame synchronization lost, re-initialization required")
    SHUT_DOWN = (5, "SHUT_DOWN", "Link released")


class TransportSession:
    """One open, configured and synchronized link to the Fernvale bridge.

    Only one session may exist at a time in a process, the bridge and the
    serial link are single-tenant.

    :cvar MAX_DATA_READ: Maximal number of bytes read by a single transaction.
    :cvar MAX_DATA_WRITE: Maximal number of bytes written by a single transaction.
    :cvar SHUTDOWN_FRAME: Frame asking the bridge to leave the command mode.
    :cvar SHUTDOWN_TIMEOUT: Deadline of the shutdown frame write in milliseconds.
    """

    MAX_DATA_READ = 128
    MAX_DATA_WRITE = 128
    SHUTDOWN_FRAME = b"\x00\x00"
    SHUTDOWN_TIMEOUT = 1000

    _active: ClassVar[Optional["TransportSession"]] = None
    _active_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        channel: ByteChannel,
        port: Optional[Closeable] = None,
        transaction_timeout: int = 1000,
        name: Optional[str] = None,
    ) -> None:
        """Initialize the session on an open and configured link.

        :param channel: Channel of the serial link.
        :param port: Object owning the link, closed on shutdown.
        :param transaction_timeout: Default deadline of one transaction in milliseconds,
            0 waits forever.
        :param name: Name used in log messages, defaults to the channel description.
        :raises SessionStateError: Another session is still alive.
        """
        with self._active_lock:
            if TransportSession._active is not None:
                raise SessionStateError(
                    f"session '{TransportSession._active}' is still alive, shut it down first"
                )
            TransportSession._active = self
        self.channel = channel
        self.port = port
        self.transaction_timeout = transaction_timeout
        self.name = name or str(channel)
        self.framer = CommandFramer(channel)
        self._state = SessionState.CONFIGURED
        self._busy = threading.Lock()

    @classmethod
    def get_active(cls) -> Optional["TransportSession"]:
        """Get the session currently holding the link, if any."""
        return cls._active

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_active(self) -> bool:
        """The session accepts transactions."""
        return self._state is SessionState.ACTIVE

    def _set_state(self, state: SessionState) -> None:
        logger.debug(f"{self}: {self._state.label} -> {state.label}")
        self._state = state

    def _require(self, state: SessionState, operation: str) -> None:
        if self._state is not state:
            raise SessionStateError(
                f"cannot {operation} in state {self._state.label}, {state.label} required"
            )

    def synchronize(self, timeout: int = 5000) -> int:
        """Run the handshake with the bridge.

        :param timeout: Deadline of the handshake in milliseconds, 0 waits forever.
        :return: Number of boot bytes discarded before the ready sentinel.
        :raises SessionStateError: The session is not freshly configured.
        :raises SyncTimeout: The ready sentinel did not arrive in time.
        """
        self._require(SessionState.CONFIGURED, "synchronize")
        try:
            discarded = handshake.synchronize(self.channel, Timeout(timeout))
        except FernvaleTransportError:
            self._set_state(SessionState.FAULTED)
            raise
        self._set_state(SessionState.SYNCED)
        return discarded

    def activate(self) -> None:
        """Start accepting transactions on a synchronized session.

        :raises SessionStateError: The session is not synchronized.
        """
        self._require(SessionState.SYNCED, "activate")
        self._set_state(SessionState.ACTIVE)
        logger.info(f"Fernvale bridge on {self.name} is ready")

    def check_transaction(self, transaction: SpiTransaction) -> None:
        """Validate transaction sizes against the capability limits.

        :param transaction: Transaction to check.
        :raises TransactionError: The transaction exceeds the limits.
        """
        if transaction.write_count > self.MAX_DATA_WRITE:
            raise TransactionError(
                f"Write count {transaction.write_count} exceeds the limit of {self.MAX_DATA_WRITE}"
            )
        if transaction.read_count > self.MAX_DATA_READ:
            raise TransactionError(
                f"Read count {transaction.read_count} exceeds the limit of {self.MAX_DATA_READ}"
            )

    def execute(
        self, transaction: SpiTransaction, timeout: Optional[int] = None
    ) -> SpiTransaction:
        """Execute one SPI transaction.

        Any transport failure leaves the bridge at an unknown frame offset,
        so the session becomes FAULTED and must be re-initialized.

        :param transaction: Transaction to execute.
        :param timeout: Deadline in milliseconds, defaults to ``transaction_timeout``.
        :return: Completed transaction holding the reply bytes.
        :raises SessionStateError: The session is not active.
        :raises TransactionError: The transaction exceeds the capability limits.
        :raises ContentionError: Another transaction is in flight.
        """
        self._require(SessionState.ACTIVE, "execute a transaction")
        self.check_transaction(transaction)
        if not self._busy.acquire(blocking=False):
            raise ContentionError("another transaction is in flight on this session")
        try:
            deadline = Timeout(self.transaction_timeout if timeout is None else timeout)
            return self.framer.execute(transaction, deadline)
        except FernvaleTransportError as exc:
            logger.error(f"{self}: transaction {transaction!r} failed: {exc}")
            self._set_state(SessionState.FAULTED)
            raise
        finally:
            self._busy.release()

    def send_command(self, write_bytes: bytes, read_count: int) -> bytes:
        """Execute a transaction given by its raw parts.

        :param write_bytes: Bytes to clock out to the flash chip.
        :param read_count: Number of bytes to clock in.
        :return: Bytes read from the flash chip.
        """
        result = self.execute(SpiTransaction(write_bytes, read_count))
        assert result.read_bytes is not None
        return result.read_bytes

    def shutdown(self) -> None:
        """Ask the bridge to leave the command mode and release the link.

        The shutdown frame is best-effort: failures are logged only. Calling
        the method more than once has no further effect.
        """
        if self._state is SessionState.SHUT_DOWN:
            return
        try:
            if self._state in (SessionState.SYNCED, SessionState.ACTIVE):
                try:
                    self.channel.write_all(self.SHUTDOWN_FRAME, Timeout(self.SHUTDOWN_TIMEOUT))
                except FernvaleTransportError as exc:
                    logger.warning(f"{self}: shutdown frame not delivered: {exc}")
            elif self._state is SessionState.FAULTED:
                logger.warning(f"{self}: frame synchronization lost, shutdown frame skipped")
            if self.port is not None:
                try:
                    self.port.close()
                except Exception as exc:  # pylint: disable=broad-except
                    logger.warning(f"{self}: error closing the port: {exc}")
        finally:
            self._set_state(SessionState.SHUT_DOWN)
            with self._active_lock:
                if TransportSession._active is self:
                    TransportSession._active = None

    close = shutdown

    def __enter__(self) -> "TransportSession":
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()

    def __str__(self) -> str:
        return self.name
