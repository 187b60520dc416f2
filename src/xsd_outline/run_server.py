"""Executable entry point for launching the XSD Outline FastAPI application.

Process managers can import the stable ``app`` object from ``xsd_outline.app``,
or run ``python -m xsd_outline.run_server`` directly for local development.

Environment Variables:
    PORT (int): Override listening port (default 8000).
    XSD_OUTLINE_CONFIG / XSD_OUTLINE_WORKSPACE: see :mod:`xsd_outline.config`.

Example:
    $ python -m xsd_outline.run_server
    $ PORT=9000 XSD_OUTLINE_WORKSPACE=/work python -m xsd_outline.run_server
"""

from __future__ import annotations

import os

import uvicorn

from .app import app


def main() -> None:
    """Launch the ASGI server with development-friendly defaults."""
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
