"""Parsers for CUPS command-line output.

Each parser is a pure function over the raw text a utility printed. None of
them raise: unexpected or empty output yields None, an empty list, or the
documented fallback.

Sample outputs these were written against:

    $ lp -d Office_Printer job.pdf
    request id is Office_Printer-42 (1 file(s))

    $ lpstat -d
    system default destination: Office_Printer

    $ lpstat -p
    printer Office_Printer is idle.  enabled since Tue 14 Oct 2025 09:12:03
    printer Label_Writer disabled since Mon 13 Oct 2025 17:40:11 -
            Paused

    $ lpoptions -p Office_Printer -l
    PageSize/Media Size: *A4 Letter Legal Env10
    ColorModel/Output Mode: Gray *RGB
"""

import re

from print_bridge.printing.models import PrinterStatus

FALLBACK_PAPER_SIZES = ["A4", "Letter"]

_JOB_ID_RE = re.compile(r"request id is (\S+)")
_DEFAULT_DEST_PREFIX = "system default destination:"
_PAPER_TOKEN_RE = re.compile(r"\*?([A-Za-z0-9]+)")
_IDLE_RE = re.compile(r"\bidle\b")
_BUSY_RE = re.compile(r"\bis busy\b|\bnow printing\b")


def parse_job_id(lp_output: str) -> str | None:
    match = _JOB_ID_RE.search(lp_output or "")
    return match.group(1) if match else None


def parse_default_destination(lpstat_output: str) -> str | None:
    for line in (lpstat_output or "").splitlines():
        line = line.strip()
        if line.startswith(_DEFAULT_DEST_PREFIX):
            name = line[len(_DEFAULT_DEST_PREFIX):].strip()
            return name or None
    return None


def parse_printer_names(lpstat_output: str) -> list[str]:
    names: list[str] = []
    for line in (lpstat_output or "").splitlines():
        # Indented lines continue the previous printer's entry
        if not line.startswith("printer "):
            continue
        parts = line.split()
        if len(parts) >= 2 and parts[1] not in names:
            names.append(parts[1])
    return names


def _status_line(lpstat_output: str) -> str:
    """The head line's text after "printer NAME", so a queue name never matches."""
    lines = (lpstat_output or "").splitlines()
    for line in lines:
        if line.startswith("printer "):
            parts = line.split(None, 2)
            return parts[2] if len(parts) > 2 else ""
    return lines[0] if lines else ""


def classify_status(lpstat_output: str) -> PrinterStatus:
    """Classify from the "printer NAME ..." head line only.

    Indented reason lines below it are free text and may mention any state.
    """
    line = _status_line(lpstat_output)
    if "disabled" in line:
        return "disabled"
    if _IDLE_RE.search(line):
        return "idle"
    if _BUSY_RE.search(line):
        return "busy"
    return "unknown"


def _option_lines(lpoptions_output: str, prefix: str):
    for line in (lpoptions_output or "").splitlines():
        if line.startswith(prefix):
            _, _, values = line.partition(":")
            yield values


def parse_color_support(lpoptions_output: str) -> bool:
    """True when a ColorModel option offers an RGB or CMYK value."""
    for values in _option_lines(lpoptions_output, "ColorModel"):
        if "RGB" in values or "CMYK" in values:
            return True
    return False


def parse_paper_sizes(lpoptions_output: str) -> list[str]:
    """PageSize choices in first-seen order, or the A4/Letter fallback.

    Only the choice list after the colon is tokenized, so the option label
    ("PageSize/Media Size") never shows up as a size. The leading ``*``
    marking the current default is dropped.
    """
    sizes: list[str] = []
    for values in _option_lines(lpoptions_output, "PageSize/"):
        for match in _PAPER_TOKEN_RE.finditer(values):
            size = match.group(1)
            if size not in sizes:
                sizes.append(size)
    return sizes or list(FALLBACK_PAPER_SIZES)
