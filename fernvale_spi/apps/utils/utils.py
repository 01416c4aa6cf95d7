#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Fernvale SPI application utilities and helper functions."""

import contextlib
import logging
import re
import sys
from functools import wraps
from typing import Any, Callable, Iterator, Optional, Union

import click
import hexdump

from fernvale_spi import FERNVALE_DEBUG_LOG_FILE, FERNVALE_DEBUG_LOGGING_DISABLED
from fernvale_spi.exceptions import FernvaleError

logger = logging.getLogger(__name__)


class FernvaleAppError(FernvaleError):
    """Non-fatal error of a command line application.

    :cvar fmt: Format string template for error message display.
    """

    fmt = "{description}"

    def __init__(self, desc: Optional[str] = None, error_code: int = 1) -> None:
        """Initialize the AppError.

        :param desc: Description to print out on command line, defaults to None
        :param error_code: Error code passed to OS, defaults to 1
        """
        super().__init__(desc)
        self.error_code = error_code


class INT(click.ParamType):
    """Click parameter type for integers in any base Python accepts (0x, 0b, 0o, 1_000).

    :cvar name: Parameter type name used by Click framework.
    """

    name = "integer"

    def __init__(self, base: int = 0) -> None:
        """Initialize custom INT param class.

        :param base: requested base for the number, defaults to 0
        """
        super().__init__()
        self.base = base

    # pylint: disable=inconsistent-return-statements
    def convert(
        self,
        value: Any,
        param: Optional[click.Parameter] = None,
        ctx: Optional[click.Context] = None,
    ) -> int:
        """Perform the conversion str -> int.

        :param value: value to convert
        :param param: Click parameter, defaults to None
        :param ctx: Click context, defaults to None
        :return: value as integer
        """
        if isinstance(value, int):
            return value
        try:
            return int(value, self.base)
        except TypeError:
            self.fail(
                "expected string for int() conversion, got "
                f"{value!r} of type {type(value).__name__}",
                param,
                ctx,
            )
        except ValueError:
            self.fail(f"{value!r} is not a valid integer", param, ctx)


def _split_string(string: str, length: int) -> list:
    """Split the string into chunks of same length."""
    return [string[i : i + length] for i in range(0, len(string), length)]


def format_raw_data(data: bytes, use_hexdump: bool = False, line_length: int = 16) -> str:
    """Format bytes data into human-readable form.

    :param data: Data to format
    :param use_hexdump: Use hexdump with addresses and ASCII, defaults to False
    :param line_length: bytes per line, defaults to 16
    :return: formatted string (multilined if necessary)
    """
    if use_hexdump:
        return hexdump.hexdump(data, result="return")
    parts = [_split_string(line, 2) for line in _split_string(data.hex(), line_length * 2)]
    return "\n".join(" ".join(line) for line in parts)


def parse_hex_data(hex_data: str) -> bytes:
    """Parse hex-data into bytes.

    :param hex_data: input hex-data, e.g: {{1122}}, {{11 22}}
    :raises FernvaleError: Failure to parse given input
    :return: data parsed from input
    """
    hex_data = hex_data.replace(" ", "")
    if not hex_data.startswith(("{{", "[[")) or not hex_data.endswith(("}}", "]]")):
        raise FernvaleError("Incorrectly formatted hex-data: Need to start with {{ and end with }}")
    hex_data = hex_data.replace("{{", "").replace("}}", "").replace("[[", "").replace("]]", "")
    if not re.fullmatch(r"[0-9a-fA-F]*", hex_data) or len(hex_data) % 2:
        raise FernvaleError("Incorrect hex-data: Need to have valid hex string")
    return bytes.fromhex(hex_data)


def parse_file_and_size(file_and_size: str) -> tuple[str, int]:
    """Parse composite file-size params.

    :param file_and_size: original param that possibly contains size constrain
    :return: Tuple of path as str and size as int (-1 if not present)
    """
    if "," in file_and_size:
        file_path, size = file_and_size.split(",")
        return file_path, int(size, 0)
    return file_and_size, -1


def catch_fernvale_error(function: Callable) -> Callable:
    """Catch and handle FernvaleError and other exceptions.

    FernvaleAppError exits with its own error code (default 1), other
    FernvaleErrors and AssertionErrors exit with 2 and anything else with 3.
    The traceback of unexpected errors goes to the debug log.

    :param function: The function to be decorated.
    :return: The decorated function.
    """

    @wraps(function)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return function(*args, **kwargs)
        except FernvaleAppError as app_exc:
            if app_exc.description:
                click.echo(f"{app_exc.__class__.__name__}: {app_exc}", err=True)
            if 0 < app_exc.error_code < 256:
                sys.exit(app_exc.error_code)
            sys.exit(1)
        except (AssertionError, FernvaleError) as fernvale_exc:
            click.echo(f"{fernvale_exc.__class__.__name__}: {fernvale_exc}", err=True)
            logger.debug(str(fernvale_exc), exc_info=True)
            if not FERNVALE_DEBUG_LOGGING_DISABLED:
                click.secho(
                    f"See debug log file: {FERNVALE_DEBUG_LOG_FILE} for more info", fg="yellow"
                )
            sys.exit(2)
        except (Exception, KeyboardInterrupt) as base_exc:  # pylint: disable=broad-except
            click.echo(f"GENERAL ERROR: {type(base_exc).__name__}: {base_exc}", err=True)
            logger.debug(str(base_exc), exc_info=True)
            if not FERNVALE_DEBUG_LOGGING_DISABLED:
                click.secho(
                    f"See debug log file: {FERNVALE_DEBUG_LOG_FILE} for more info.", fg="yellow"
                )
            sys.exit(3)

    return wrapper


@contextlib.contextmanager
def progress_bar(
    suppress: bool = False, **progress_bar_params: Union[str, int]
) -> Iterator[Callable[[int, int], None]]:
    """Creates a progress bar and return callback function for updating the progress bar.

    :param suppress: Suppress the progress bar creation; return an empty callback, defaults to False
    :param progress_bar_params: Standard parameters for click.progressbar
    :yield: Callback for updating the progress bar
    """
    if suppress:
        yield lambda _x, _y: None
    else:
        with click.progressbar(length=100, **progress_bar_params) as p_bar:  # type: ignore

            def progress(step: int, total_steps: int) -> None:
                increment = step * 100 // max(total_steps, 1) - p_bar.pos
                p_bar.update(increment)

            yield progress
