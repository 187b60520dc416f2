import json
import subprocess
import sys
from pathlib import Path

from xsd_outline.app import app

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "export_schemas.py"


def test_openapi_contains_outline_paths():
    spec = app.openapi()
    for path in ("/outline", "/tree", "/navigate", "/decorations", "/refresh"):
        assert path in spec["paths"]
    assert spec["info"]["title"] == "XSD Outline API"


def test_export_script_runs(tmp_path):
    out_dir = tmp_path / "schemas"
    cmd = [sys.executable, str(SCRIPT), "--out-dir", str(out_dir)]
    output = subprocess.check_output(cmd, text=True)
    openapi_path = out_dir / "openapi.json"
    assert openapi_path.exists()
    data = json.loads(openapi_path.read_text())
    assert data.get("openapi")

    outline_schema = json.loads((out_dir / "outline-response.json").read_text())
    assert "generation" in outline_schema["properties"]
    assert (out_dir / "decoration-response.json").exists()
    assert "POST   /refresh" in output
    assert "GET    /tree" in output
