#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause
"""Command line utility for SPI flash behind a Fernvale serial bridge."""

import sys
from typing import Optional

import click

from fernvale_spi.apps.utils import fvspi_logger
from fernvale_spi.apps.utils.common_cli_options import (
    baudrate_option,
    fvspi_apps_common_options,
    port_option,
    sync_timeout_option,
    timeout_option,
)
from fernvale_spi.apps.utils.utils import (
    INT,
    FernvaleAppError,
    catch_fernvale_error,
    format_raw_data,
    parse_file_and_size,
    parse_hex_data,
    progress_bar,
)
from fernvale_spi.exceptions import FernvaleError
from fernvale_spi.programmer.fernvale import PROGRAMMER_NAME, fernvale_spi_init
from fernvale_spi.programmer.host import ProgrammerHost
from fernvale_spi.programmer.params import ProgrammerParams
from fernvale_spi.programmer.spi import spi_read_jedec_id


def get_host(ctx: click.Context) -> ProgrammerHost:
    """Initialize the programmer on first use and return its host.

    The host is shut down when the command line context closes.

    :param ctx: Click context holding the link parameters.
    :return: Host with the Fernvale SPI master registered.
    """
    obj = ctx.find_root().obj
    if obj.get("host") is None:
        host = ProgrammerHost()
        root = ctx.find_root()
        root.call_on_close(host.shutdown)
        fernvale_spi_init(host, ProgrammerParams(obj["params"]))
        obj["host"] = host
    return obj["host"]


def load_data(binary: str) -> bytes:
    """Load data given either as {{HEX-DATA}} or FILE[,BYTE_COUNT]."""
    try:
        return parse_hex_data(binary)
    except FernvaleError:
        file_path, size = parse_file_and_size(binary)
        try:
            with open(file_path, "rb") as f:
                return f.read(size)
        except OSError as exc:
            raise FernvaleAppError(f"Cannot load data from {binary}: {exc}") from exc


@click.group(name="fvspi", no_args_is_help=True)
@fvspi_apps_common_options
@port_option()
@baudrate_option()
@timeout_option(timeout=1000)
@sync_timeout_option(timeout=5000)
@click.pass_context
def main(
    ctx: click.Context,
    port: str,
    baudrate: int,
    timeout: int,
    sync_timeout: int,
    log_level: int,
) -> int:
    """Utility for SPI flash connected through a Fernvale serial bridge."""
    fvspi_logger.install(level=log_level)
    params = f"dev={port},baud={baudrate},sync_timeout={sync_timeout},timeout={timeout}"
    ctx.obj = {"params": params, "host": None}
    return 0


@main.command()
@click.pass_context
def sync(ctx: click.Context) -> None:
    """Synchronize with the bridge and report it ready."""
    host = get_host(ctx)
    click.echo(f"{PROGRAMMER_NAME} ready: {host.master}")


@click.option("-r", "--read-count", type=INT(), default=0, help="Number of bytes to clock in.")
@click.argument("write_data", type=str, required=True, metavar="{{HEX-DATA}}")
@main.command(no_args_is_help=True)
@click.pass_context
def transfer(ctx: click.Context, write_data: str, read_count: int) -> None:
    """Execute one raw SPI transaction, e.g. transfer -r 3 {{9f}}."""
    host = get_host(ctx)
    reply = host.send_command(parse_hex_data(write_data), read_count)
    if reply:
        click.echo(format_raw_data(reply))


@main.command()
@click.pass_context
def read_id(ctx: click.Context) -> None:
    """Read the JEDEC ID of the flash chip."""
    host = get_host(ctx)
    jedec_id = spi_read_jedec_id(host.master)
    click.echo(f"Manufacturer ID: 0x{jedec_id >> 16:02x}")
    click.echo(f"Device ID: 0x{jedec_id & 0xFFFF:04x}")


@click.argument("length", type=INT(), required=True)
@click.argument("address", type=INT(), required=True)
@click.option("-o", "--output", help="Path to output binary file", type=str, required=False)
@click.option("-r", "--raw", is_flag=True, default=False, help="Do not use hexdump format")
@main.command(no_args_is_help=True)
@click.pass_context
def read_memory(
    ctx: click.Context, address: int, length: int, raw: bool, output: Optional[str]
) -> None:
    """Read LENGTH bytes of flash starting at ADDRESS."""
    host = get_host(ctx)
    with progress_bar(suppress=not output, label="Reading memory") as progress_callback:
        data = host.read(address, length, progress_callback)

    if output:
        with open(output, "wb") as f:
            f.write(data)
        click.echo(f"Data read from memory has been saved to {output}")
    else:
        click.echo(format_raw_data(data, use_hexdump=not raw))


@click.option(
    "-b",
    "--binary",
    help="Data to program",
    metavar="FILE[,BYTE_COUNT] | {{HEX-DATA}}",
    type=str,
    required=True,
)
@click.option(
    "--aai", is_flag=True, default=False, help="Use AAI word programming instead of page program."
)
@click.argument("address", type=INT(), required=True)
@main.command(no_args_is_help=True)
@click.pass_context
def write_memory(ctx: click.Context, address: int, binary: str, aai: bool) -> None:
    """Program data into erased flash starting at ADDRESS."""
    data = load_data(binary)
    host = get_host(ctx)
    with progress_bar(label="Writing memory") as progress_callback:
        if aai:
            host.write_aai(address, data, progress_callback)
        else:
            host.write_256(address, data, progress_callback)
    click.echo(f"Written {len(data)} bytes at 0x{address:x}")


@catch_fernvale_error
def safe_main() -> None:
    """Calls the main function."""
    sys.exit(main())  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    safe_main()
