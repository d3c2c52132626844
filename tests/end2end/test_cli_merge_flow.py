from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from subprocess import run as subprocess_run  # noqa: S404

import fitz

from pagemerge.codec import encode_payload

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def _run_cli(*args: str, cwd: Path):
    return subprocess_run(  # noqa: S603
        [sys.executable, "-m", "pagemerge.cli", *args],
        capture_output=True,
        text=True,
        check=False,
        cwd=cwd,
        env={**os.environ, "PYTHONPATH": os.pathsep.join(filter(None, [str(SRC_DIR), os.environ.get("PYTHONPATH")]))},
    )


def test_cli_merges_pages_from_files(tmp_path: Path, make_pdf) -> None:
    (tmp_path / "a.pdf").write_bytes(make_pdf(2, label="alpha"))
    (tmp_path / "b.pdf").write_bytes(make_pdf(1, label="beta"))

    result = _run_cli(
        "merge",
        "--page",
        "b.pdf:1",
        "--page",
        "a.pdf:2:90",
        "--output",
        "out/merged.pdf",
        "--title",
        "Merged",
        cwd=tmp_path,
    )

    assert result.returncode == 0, result.stderr
    with fitz.open(tmp_path / "out" / "merged.pdf") as doc:
        assert [page.get_text().strip() for page in doc] == ["beta page 1", "alpha page 2"]
        assert doc[1].rotation == 90
        assert doc.metadata["title"] == "Merged"


def test_cli_merges_from_request_file(tmp_path: Path, make_pdf) -> None:
    encoded = encode_payload(make_pdf(3, label="gamma"))
    request = {
        "pages": [{"pdfDataEncoded": encoded, "pageNumber": 3}, {"pdfDataEncoded": encoded, "pageNumber": 3}],
        "metadata": {"author": "Ops"},
    }
    (tmp_path / "request.json").write_text(json.dumps(request), encoding="utf-8")

    result = _run_cli("merge", "--request", "request.json", "--output", "merged.pdf", "--no-compress", cwd=tmp_path)

    assert result.returncode == 0, result.stderr
    with fitz.open(tmp_path / "merged.pdf") as doc:
        assert doc.page_count == 2
        assert doc.metadata["author"] == "Ops"


def test_cli_fails_on_missing_page(tmp_path: Path, make_pdf) -> None:
    (tmp_path / "a.pdf").write_bytes(make_pdf(1))

    result = _run_cli("merge", "--page", "a.pdf:5", "--output", "merged.pdf", cwd=tmp_path)

    assert result.returncode == 1
    assert not (tmp_path / "merged.pdf").exists()


def test_cli_rejects_page_zero_without_traceback(tmp_path: Path, make_pdf) -> None:
    (tmp_path / "a.pdf").write_bytes(make_pdf(1))

    result = _run_cli("merge", "--page", "a.pdf:0", "--output", "merged.pdf", cwd=tmp_path)

    assert result.returncode == 2
    assert "numbers start at 1" in result.stderr
    assert "Traceback" not in result.stderr
    assert not (tmp_path / "merged.pdf").exists()
