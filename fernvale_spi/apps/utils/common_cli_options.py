#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""CLI helper for Click."""

import logging
from typing import Any, Callable, TypeVar, Union

import click

from fernvale_spi import __version__ as fernvale_version
from fernvale_spi.apps.utils.utils import INT
from fernvale_spi.transport.link import DEFAULT_PORT, BaudRate, default_baudrate

FC = TypeVar("FC", bound=Union[Callable[..., Any], click.Command])


def port_option(default: str = DEFAULT_PORT) -> Callable[[FC], FC]:
    """Click decorator handling the serial device of the bridge.

    Provides: `port: str` path of the serial device.

    :param default: Default serial device
    :return: Click decorator.
    """
    return click.option(
        "-p",
        "--port",
        metavar="DEVICE",
        default=default,
        show_default=True,
        help="Serial device of the Fernvale bridge, e.g. /dev/ttyUSB0.",
    )


def baudrate_option() -> Callable[[FC], FC]:
    """Click decorator handling the serial speed.

    Provides: `baudrate: int` speed in bits per second.

    :return: Click decorator.
    """
    return click.option(
        "-b",
        "--baudrate",
        type=click.Choice(BaudRate.labels()),
        default=str(default_baudrate()),
        show_default=True,
        callback=lambda _ctx, _param, value: int(value),
        help="Speed of the serial link.",
    )


def timeout_option(
    timeout: int = 1000,
    use_long_form_only: bool = False,
) -> Callable[[FC], FC]:
    """Get the timeout option.

    :param use_long_form_only: Use long version only
    :param timeout: Default timeout in milliseconds

    :return: click decorator
    """
    options = [] if use_long_form_only else ["-t"]
    options.append("--timeout")
    return click.option(
        *options,
        metavar="<ms>",
        type=INT(),
        help=f"""Deadline of one SPI transaction. The default is {timeout} milliseconds,
        0 waits forever.""",
        default=timeout,
    )


def sync_timeout_option(timeout: int = 5000) -> Callable[[FC], FC]:
    """Get the synchronization timeout option.

    :param timeout: Default timeout in milliseconds
    :return: click decorator
    """
    return click.option(
        "--sync-timeout",
        metavar="<ms>",
        type=INT(),
        help=f"""Deadline of the handshake with the bridge. The default is {timeout} milliseconds,
        0 waits forever.""",
        default=timeout,
    )


def fvspi_apps_common_options(options: FC) -> FC:
    """Common click options.

    Sets --help, --version; provides: `log_level: int` for logging.

    :return: click decorator
    """
    options = click.help_option("--help")(options)
    options = click.version_option(fernvale_version, "--version")(options)
    options = click.option(
        "-vv",
        "--debug",
        "log_level",
        flag_value=logging.DEBUG,
        help="Display more debugging information.",
    )(options)
    options = click.option(
        "-v",
        "--verbose",
        "log_level",
        flag_value=logging.INFO,
        help="Print more detailed information",
    )(options)
    return options
