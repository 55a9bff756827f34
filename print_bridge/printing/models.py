"""Wire models for print submission and printer discovery."""

from typing import Literal

from pydantic import BaseModel, Field


class PrintOptions(BaseModel):
    paper_size: str | None = None
    orientation: str | None = None  # "portrait" | "landscape"; anything else is ignored
    color: bool | None = None
    duplex: bool | None = None


class PrintRequest(BaseModel):
    printer_name: str | None = None
    content: str  # raw text/HTML, or base64 for pdf and image
    content_type: str  # "pdf" | "html" | "text" | "image", checked against settings
    copies: int | None = Field(None, ge=1, le=99)  # None = one copy
    options: PrintOptions | None = None


class PrintResponse(BaseModel):
    success: bool
    message: str
    job_id: str | None = None  # spooler request id, when one was reported


PrinterStatus = Literal["idle", "busy", "disabled", "unknown"]


class PrinterInfo(BaseModel):
    name: str
    status: PrinterStatus = "unknown"
    is_default: bool = False
    supports_color: bool = False
    paper_sizes: list[str] = Field(default_factory=lambda: ["A4", "Letter"])
