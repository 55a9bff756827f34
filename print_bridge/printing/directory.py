"""Printer discovery through lpstat and lpoptions."""

import asyncio

from print_bridge.config.settings import Settings
from print_bridge.errors import BridgeError, PrinterError
from print_bridge.logging.audit import get_audit_logger
from print_bridge.printing.models import PrinterInfo
from print_bridge.printing.parsers import (
    classify_status,
    parse_color_support,
    parse_default_destination,
    parse_paper_sizes,
    parse_printer_names,
)
from print_bridge.printing.process import run_command


async def get_default_printer(settings: Settings) -> str | None:
    """The spooler's system default destination; None when unset or unreadable."""
    try:
        result = await run_command([settings.lpstat_command, "-d"], settings.process_timeout_seconds)
    except BridgeError as e:
        get_audit_logger().warning(
            "Default printer lookup failed",
            extra={"audit_data": {"error": e.kind, "detail": e.message}},
        )
        return None
    return parse_default_destination(result.stdout)


async def list_printers(settings: Settings) -> list[PrinterInfo]:
    """Every configured printer with its status and capabilities.

    Failing to run lpstat at all raises PrinterError. A failure while
    inspecting one printer only degrades that printer's entry.
    """
    default_printer = await get_default_printer(settings)

    try:
        result = await run_command([settings.lpstat_command, "-p"], settings.process_timeout_seconds)
    except BridgeError as e:
        raise PrinterError(f"Cannot list printers: {e.message}") from e

    names = parse_printer_names(result.stdout)
    return list(await asyncio.gather(
        *(_describe_printer(name, name == default_printer, settings) for name in names)
    ))


async def _describe_printer(name: str, is_default: bool, settings: Settings) -> PrinterInfo:
    info = PrinterInfo(name=name, is_default=is_default)
    timeout = settings.process_timeout_seconds

    try:
        status = await run_command([settings.lpstat_command, "-p", name], timeout)
        info.status = classify_status(status.stdout)

        options = await run_command([settings.lpoptions_command, "-p", name, "-l"], timeout)
        info.supports_color = parse_color_support(options.stdout)
        info.paper_sizes = parse_paper_sizes(options.stdout)
    except BridgeError as e:
        get_audit_logger().warning(
            "Printer query failed",
            extra={"audit_data": {"printer": name, "error": e.kind, "detail": e.message}},
        )

    return info
