"""Captured CUPS command output used across the printer tests."""

LPSTAT_PRINTERS = (
    "printer Office_Printer is idle.  enabled since Tue 14 Oct 2025 09:12:03\n"
    "printer Label_Writer disabled since Mon 13 Oct 2025 17:40:11 -\n"
    "\tPaused\n"
)

LPOPTIONS_COLOR = (
    "PageSize/Media Size: *A4 Letter Legal Env10\n"
    "ColorModel/Output Mode: Gray *RGB\n"
    "Duplex/2-Sided Printing: *None DuplexNoTumble DuplexTumble\n"
)

LPOPTIONS_MONO = (
    "PageSize/Media Size: w62h29 *w62h100 w62h29\n"
    "Resolution/Resolution: *300dpi\n"
)
