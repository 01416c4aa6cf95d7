#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Fernvale SPI exception classes.

This module defines the exception hierarchy used by the serial transport,
the programmer host boundary and the command line application.
"""

from typing import Optional

#######################################################################
# # Fernvale SPI Exceptions
#######################################################################


class FernvaleError(Exception):
    """Fernvale SPI Base Exception.

    All exceptions raised by this package derive from this class.

    :cvar fmt: Default error message format template.
    """

    fmt = "Fernvale: {description}"

    def __init__(self, desc: Optional[str] = None) -> None:
        """Initialize the base exception.

        :param desc: Optional description of the exception.
        """
        super().__init__()
        self.description = desc

    def __str__(self) -> str:
        """Return string representation of the exception.

        :return: Formatted exception message as string.
        """
        return self.fmt.format(description=self.description or "Unknown Error")


class FernvaleValueError(FernvaleError, ValueError):
    """Fernvale standard value error exception."""


class FernvaleTimeoutError(FernvaleError, TimeoutError):
    """Operation did not finish within its deadline."""


class TransactionError(FernvaleValueError):
    """SPI transaction violates the caller contract.

    Raised for byte counts outside of the frame header range or above the
    capability limits advertised by the transport. This is never a transport
    failure, the link stays usable.
    """


#######################################################################
# # Serial transport exceptions
#######################################################################


class FernvaleTransportError(FernvaleError):
    """Base exception for failures of the serial transport.

    :cvar fmt: Format string template for transport error messages.
    """

    fmt = "Transport: {description}"

    def __init__(self, desc: Optional[str] = None, transferred: int = 0) -> None:
        """Initialize the transport exception.

        :param desc: Description of the failure.
        :param transferred: Number of bytes moved before the failure happened.
        """
        super().__init__(desc)
        self.transferred = transferred


class OpenError(FernvaleTransportError, ConnectionError):
    """Serial device cannot be opened (missing, permission denied or busy)."""

    fmt = "Transport: Unable to open serial device -> {description}"


class ConfigureError(FernvaleTransportError):
    """Line discipline of the serial device cannot be configured."""

    fmt = "Transport: Unable to configure serial device -> {description}"


class ChannelClosed(FernvaleTransportError, ConnectionError):
    """Peer closed the link."""

    fmt = "Transport: Channel closed -> {description}"


class TransportIOError(FernvaleTransportError, IOError):
    """Any other I/O failure of the link, carrying the underlying error number."""

    def __init__(
        self, desc: Optional[str] = None, errno: Optional[int] = None, transferred: int = 0
    ) -> None:
        """Initialize the I/O exception.

        :param desc: Description of the failure.
        :param errno: Error number reported by the operating system.
        :param transferred: Number of bytes moved before the failure happened.
        """
        super().__init__(desc, transferred=transferred)
        self.errno = errno


class TransportTimeout(FernvaleTransportError, TimeoutError):
    """Transfer did not complete before its deadline."""

    fmt = "Transport: Timeout -> {description}"


class SyncTimeout(TransportTimeout):
    """Ready sentinel was not observed within the handshake deadline."""

    fmt = "Transport: Synchronization timeout -> {description}"

    def __init__(self, desc: Optional[str] = None, discarded: int = 0) -> None:
        """Initialize the synchronization timeout.

        :param desc: Description of the failure.
        :param discarded: Number of bytes discarded while waiting for the sentinel.
        """
        super().__init__(desc)
        self.discarded = discarded


class ShortTransfer(FernvaleTransportError):
    """A frame phase moved fewer bytes than contracted."""

    fmt = "Transport: Short transfer in {phase} phase -> {description}"

    def __init__(self, phase: str, expected: int, actual: int) -> None:
        """Initialize the short transfer exception.

        :param phase: Name of the frame phase (header, payload or reply).
        :param expected: Number of bytes the phase should have moved.
        :param actual: Number of bytes the phase actually moved.
        """
        super().__init__(f"wanted {expected} bytes, but got {actual}", transferred=actual)
        self.phase = phase
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        """Return string representation of the exception.

        :return: Formatted exception message including the phase name.
        """
        return self.fmt.format(phase=self.phase, description=self.description)


class SessionStateError(FernvaleTransportError):
    """Operation is not allowed in the current session state."""

    fmt = "Transport: Invalid session state -> {description}"


class ContentionError(FernvaleTransportError):
    """Another transaction is already in flight on the session."""

    fmt = "Transport: Session busy -> {description}"
