"""Print dispatcher: validates a print request and routes it to a format pipeline.

Pipelines:
- pdf:   base64 -> job.pdf -> lp
- html:  job.html -> wkhtmltopdf -> job.pdf -> lp (browser fallback if conversion fails)
- text:  job.txt -> lp
- image: base64 -> job.<png|jpg|...> -> lp

Every pipeline works inside its own temporary directory, removed on every
exit path. Jobs are submitted at most once; nothing is retried.
"""

import asyncio
import base64
import binascii
import re
import tempfile
from collections.abc import Awaitable, Callable
from pathlib import Path

from print_bridge.config.settings import Settings
from print_bridge.errors import (
    BridgeError,
    DecodeError,
    FileTooLarge,
    InvalidRequest,
    IoError,
    PrintError,
    UnsupportedFormat,
)
from print_bridge.logging.audit import log_print_job
from print_bridge.printing.converter import convert_html_to_pdf, open_in_browser
from print_bridge.printing.models import PrintOptions, PrintRequest, PrintResponse
from print_bridge.printing.parsers import parse_job_id
from print_bridge.printing.process import run_command

DEFAULT_DESTINATION = "default"  # log label when CUPS picks the destination
DEFAULT_COPIES = 1

_PAPER_SIZE_RE = re.compile(r"[A-Za-z0-9_.-]{1,32}")
_DATA_URL_PREFIX_RE = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)

_IMAGE_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
    (b"BM", ".bmp"),
    (b"II*\x00", ".tiff"),
    (b"MM\x00*", ".tiff"),
]

Pipeline = Callable[[PrintRequest, str | None, Settings, Path], Awaitable[PrintResponse]]


# --- Validation ---


def estimated_size(content: str) -> int:
    """Decoded size of a base64 payload, approximated as 3/4 of its length."""
    return len(content) * 3 // 4


def validate_request(request: PrintRequest, settings: Settings) -> None:
    """Reject a request before any file or process is touched."""
    if request.content_type not in settings.allowed_file_types:
        raise UnsupportedFormat(f"Content type '{request.content_type}' is not allowed")

    if estimated_size(request.content) > settings.max_file_size_bytes:
        raise FileTooLarge(f"Payload exceeds the {settings.max_file_size_mb} MB limit")

    if not request.content:
        raise InvalidRequest("Content is empty")

    if request.printer_name is not None and (
        not request.printer_name.strip() or request.printer_name.startswith("-")
    ):
        raise InvalidRequest("Invalid printer name")

    options = request.options
    if options and options.paper_size is not None and not _PAPER_SIZE_RE.fullmatch(options.paper_size):
        raise InvalidRequest("Invalid paper size")


def resolve_printer(request: PrintRequest, settings: Settings) -> str | None:
    """The destination to pass to lp, or None to let CUPS use its own default."""
    return request.printer_name or settings.default_printer or None


# --- Commands ---


def build_lp_command(
    settings: Settings,
    printer: str | None,
    copies: int | None,
    options: PrintOptions | None,
    path: Path,
) -> list[str]:
    cmd = [settings.lp_command]

    # Without -d, CUPS resolves its own default destination
    if printer is not None:
        cmd.extend(["-d", printer])

    cmd.extend(["-n", str(copies or DEFAULT_COPIES)])

    if options is not None:
        if options.paper_size:
            cmd.extend(["-o", f"media={options.paper_size}"])
        orientation = (options.orientation or "").strip().lower()
        if orientation == "landscape":
            cmd.extend(["-o", "orientation-requested=4"])
        elif orientation == "portrait":
            cmd.extend(["-o", "orientation-requested=3"])
        if options.color is not None:
            cmd.extend(["-o", f"print-color-mode={'color' if options.color else 'monochrome'}"])
        if options.duplex is not None:
            cmd.extend(["-o", f"sides={'two-sided-long-edge' if options.duplex else 'one-sided'}"])

    cmd.append(str(path))
    return cmd


def decode_payload(content: str) -> bytes:
    """Decode base64 content, tolerating whitespace and a data: URL prefix."""
    payload = _DATA_URL_PREFIX_RE.sub("", content.strip(), count=1)
    payload = "".join(payload.split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Content is not valid base64: {e}") from e
    if not data:
        raise DecodeError("Decoded content is empty")
    return data


def image_suffix(data: bytes) -> str:
    for signature, suffix in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return suffix
    return ".png"


async def _write(path: Path, data: bytes) -> Path:
    try:
        await asyncio.to_thread(path.write_bytes, data)
    except OSError as e:
        raise IoError(f"Cannot write temporary file: {e.strerror}") from e
    return path


async def _send_to_spooler(
    path: Path,
    request: PrintRequest,
    printer: str | None,
    settings: Settings,
    message: str,
) -> PrintResponse:
    cmd = build_lp_command(settings, printer, request.copies, request.options, path)
    result = await run_command(cmd, settings.process_timeout_seconds)
    if not result.ok:
        raise PrintError(result.error_text())
    return PrintResponse(success=True, message=message, job_id=parse_job_id(result.stdout))


# --- Pipelines ---


async def _print_pdf(request: PrintRequest, printer: str | None, settings: Settings, workdir: Path) -> PrintResponse:
    path = await _write(workdir / "job.pdf", decode_payload(request.content))
    return await _send_to_spooler(path, request, printer, settings, "PDF sent to printer")


async def _print_html(request: PrintRequest, printer: str | None, settings: Settings, workdir: Path) -> PrintResponse:
    html_path = await _write(workdir / "job.html", request.content.encode("utf-8"))
    pdf_path = workdir / "job.pdf"

    conversion = await convert_html_to_pdf(settings, html_path, pdf_path)
    if conversion.ok:
        return await _send_to_spooler(pdf_path, request, printer, settings, "HTML converted and sent to printer")

    if not settings.html_browser_fallback:
        raise PrintError(f"HTML conversion failed: {conversion.error_text()}")

    if not await open_in_browser(request.content):
        raise PrintError(f"HTML conversion failed and no browser is available: {conversion.error_text()}")
    return PrintResponse(
        success=True,
        message="HTML conversion unavailable; document opened in the browser for manual printing",
        job_id=None,
    )


async def _print_text(request: PrintRequest, printer: str | None, settings: Settings, workdir: Path) -> PrintResponse:
    path = await _write(workdir / "job.txt", request.content.encode("utf-8"))
    return await _send_to_spooler(path, request, printer, settings, "Text sent to printer")


async def _print_image(request: PrintRequest, printer: str | None, settings: Settings, workdir: Path) -> PrintResponse:
    data = decode_payload(request.content)
    path = await _write(workdir / f"job{image_suffix(data)}", data)
    return await _send_to_spooler(path, request, printer, settings, "Image sent to printer")


PIPELINES: dict[str, Pipeline] = {
    "pdf": _print_pdf,
    "html": _print_html,
    "text": _print_text,
    "image": _print_image,
}


async def submit(request: PrintRequest, settings: Settings) -> PrintResponse:
    """Validate ``request`` and print it. Raises a BridgeError on any failure."""
    validate_request(request, settings)

    pipeline = PIPELINES.get(request.content_type)
    if pipeline is None:
        raise UnsupportedFormat(f"No print pipeline for content type '{request.content_type}'")

    printer = resolve_printer(request, settings)
    destination = printer or DEFAULT_DESTINATION

    try:
        with tempfile.TemporaryDirectory(prefix="print-bridge-") as workdir:
            response = await pipeline(request, printer, settings, Path(workdir))
    except BridgeError:
        log_print_job(None, destination, "failed", request.content_type)
        raise
    except OSError as e:
        log_print_job(None, destination, "failed", request.content_type)
        raise IoError(f"Cannot prepare print job: {e.strerror}") from e

    log_print_job(response.job_id, destination, "submitted", request.content_type)
    return response
