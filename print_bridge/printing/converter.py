"""HTML to PDF conversion (wkhtmltopdf) and the browser fallback."""

import asyncio
import base64
import webbrowser
from pathlib import Path

from print_bridge.config.settings import Settings
from print_bridge.errors import IoError
from print_bridge.printing.process import CommandResult, run_command

PAGE_SIZE = "A4"
MARGIN = "0.75in"


def build_convert_command(settings: Settings, html_path: Path, pdf_path: Path) -> list[str]:
    return [
        settings.html_converter_command,
        "--page-size", PAGE_SIZE,
        "--margin-top", MARGIN,
        "--margin-right", MARGIN,
        "--margin-bottom", MARGIN,
        "--margin-left", MARGIN,
        str(html_path),
        str(pdf_path),
    ]


async def convert_html_to_pdf(settings: Settings, html_path: Path, pdf_path: Path) -> CommandResult:
    """Run the converter. A missing binary reads as a failed conversion.

    Timeouts still raise TimedOut.
    """
    try:
        result = await run_command(
            build_convert_command(settings, html_path, pdf_path),
            settings.process_timeout_seconds,
        )
    except IoError as e:
        return CommandResult(returncode=127, stdout="", stderr=e.message)

    if result.ok and not pdf_path.exists():
        return CommandResult(returncode=1, stdout=result.stdout, stderr="Converter produced no PDF")
    return result


async def open_in_browser(html: str) -> bool:
    """Best effort: hand the document to the desktop's default browser.

    The page travels as a data: URI so no file outlives the print job.
    There is no signal that anything was actually printed.
    """
    encoded = base64.b64encode(html.encode("utf-8")).decode("ascii")
    return await asyncio.to_thread(webbrowser.open, f"data:text/html;charset=utf-8;base64,{encoded}")
