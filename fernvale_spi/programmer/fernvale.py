#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Fernvale SPI programmer backend."""

import logging
from typing import Optional

from fernvale_spi.exceptions import OpenError
from fernvale_spi.programmer.host import ProgrammerHost
from fernvale_spi.programmer.master import SpiMaster
from fernvale_spi.programmer.params import ProgrammerParams
from fernvale_spi.transport.link import LinkConfig, default_baudrate, open_and_sync
from fernvale_spi.transport.session import TransportSession

logger = logging.getLogger(__name__)

PROGRAMMER_NAME = "fernvale_spi"
USAGE_HINT = f"Use -p {PROGRAMMER_NAME}:dev=/dev/ttyUSB0"


def link_config_from_params(params: ProgrammerParams) -> LinkConfig:
    """Build the link configuration from programmer parameters.

    Recognized keys are ``dev``, ``baud``, ``sync_timeout`` and ``timeout``.

    :param params: Programmer parameters, the recognized keys are consumed.
    :return: Link configuration.
    :raises FernvaleValueError: Invalid or unknown parameter.
    """
    config = LinkConfig(
        port=params.extract("dev") or "",
        baudrate=params.extract_int("baud", default_baudrate()),
        sync_timeout=params.extract_int("sync_timeout", 5000),
        transaction_timeout=params.extract_int("timeout", 1000),
    )
    params.check_unhandled()
    return config


def fernvale_spi_init(
    host: ProgrammerHost, params: Optional[ProgrammerParams] = None
) -> TransportSession:
    """Initialize the Fernvale programmer and register it with the host.

    :param host: Programmer host to register the SPI master and shutdown hook with.
    :param params: Programmer parameters.
    :return: Active transport session.
    :raises OpenError: The serial device cannot be opened.
    :raises SyncTimeout: The bridge did not signal readiness in time.
    """
    config = link_config_from_params(params or ProgrammerParams())
    try:
        session = open_and_sync(config)
    except OpenError:
        logger.error(USAGE_HINT)
        raise

    master = SpiMaster(
        identifier=PROGRAMMER_NAME,
        max_data_read=session.MAX_DATA_READ,
        max_data_write=session.MAX_DATA_WRITE,
        command=session.send_command,
    )
    try:
        host.register_spi_master(master)
        try:
            host.register_shutdown(session.shutdown, f"{PROGRAMMER_NAME} shutdown")
        except Exception:
            host.spi_master = None
            raise
    except Exception:
        session.shutdown()
        raise
    return session
