#!/usr/bin/env python
"""Export the outline server's API description.

Usage:
    python scripts/export_schemas.py --out-dir build/schemas

Outputs:
    openapi.json                 FastAPI OpenAPI spec
    outline-response.json        JSON Schema of the /outline and /refresh payload
    decoration-response.json     JSON Schema of the /decorations payload

The endpoint list is printed so it can be pasted into client docs.
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List

from xsd_outline.app import DecorationResponse, OutlineResponse, app


def export_openapi(out_dir: Path) -> Path:
    path = out_dir / "openapi.json"
    path.write_text(json.dumps(app.openapi(), indent=2))
    return path


def export_payload_schemas(out_dir: Path) -> List[Path]:
    written = []
    for name, model in (
        ("outline-response", OutlineResponse),
        ("decoration-response", DecorationResponse),
    ):
        path = out_dir / f"{name}.json"
        path.write_text(json.dumps(model.model_json_schema(), indent=2))
        written.append(path)
    return written


def endpoint_lines() -> List[str]:
    lines = []
    for path, operations in sorted(app.openapi()["paths"].items()):
        for method in sorted(operations):
            lines.append(f"{method.upper():6} {path}")
    return lines


def main():
    parser = argparse.ArgumentParser(description="Export the XSD Outline API description")
    parser.add_argument("--out-dir", default="build/schemas", help="Output directory")
    args = parser.parse_args()

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    for path in [export_openapi(out_dir), *export_payload_schemas(out_dir)]:
        print(f"Exported {path}")
    print("Endpoints:")
    for line in endpoint_lines():
        print(f"  {line}")


if __name__ == "__main__":  # pragma: no cover
    main()
