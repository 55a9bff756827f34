"""Server lifecycle helpers for hosts embedding the bridge.

A desktop shell starts and stops the HTTP listener as a background task and
polls /health to report liveness; the headless entry point just runs it in
the foreground.
"""

import threading
from dataclasses import dataclass

import httpx
import uvicorn

from print_bridge.config.settings import Settings
from print_bridge.main import create_app


@dataclass
class BridgeStatus:
    running: bool
    version: str = ""
    detail: str = ""


def _uvicorn_config(settings: Settings) -> uvicorn.Config:
    return uvicorn.Config(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,  # requests are logged by the audit middleware
    )


def run_headless(settings: Settings) -> None:
    """Serve in the foreground until interrupted."""
    uvicorn.Server(_uvicorn_config(settings)).run()


class BridgeServer:
    """The HTTP listener running in a background thread."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._server = uvicorn.Server(_uvicorn_config(self._settings))
        self._thread = threading.Thread(target=self._server.run, name="print-bridge-http", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout)
        self._server = None
        self._thread = None

    def restart(self, settings: Settings) -> None:
        """Replace the settings wholesale; the old listener is stopped first."""
        self.stop()
        self._settings = settings
        self.start()


async def check_health(host: str, port: int, timeout: float = 2.0) -> BridgeStatus:
    """Probe a running bridge's /health endpoint."""
    url = f"http://{host}:{port}/health"
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        return BridgeStatus(running=False, detail=f"Cannot reach bridge: {e}")

    if response.status_code != 200:
        return BridgeStatus(running=False, detail=f"Health check returned {response.status_code}")

    try:
        body = response.json()
    except ValueError:
        return BridgeStatus(running=False, detail="Health check returned a non-JSON body")
    if not isinstance(body, dict):
        return BridgeStatus(running=False, detail="Health check returned an unexpected body")

    return BridgeStatus(running=body.get("status") == "ok", version=body.get("version", ""))
