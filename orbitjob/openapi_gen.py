"""Render an OpenAPI document to YAML and write it out or check it for drift."""

from __future__ import annotations

import argparse
import json
import math
import os
from pathlib import Path
from typing import Any, Sequence

import yaml


class OpenAPIGenError(Exception):
    """Rendering, checking or writing the OpenAPI spec failed."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise OpenAPIGenError(message)


def render_openapi_yaml(document: Any) -> bytes:
    """Render a JSON-compatible OpenAPI document as YAML ending in a newline."""
    try:
        json_text = json.dumps(document, indent=2, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise OpenAPIGenError(f"marshal openapi json: {exc}") from exc

    try:
        rendered = yaml.safe_dump(
            json.loads(json_text, parse_constant=_reject_constant),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    except (yaml.YAMLError, ValueError) as exc:
        raise OpenAPIGenError(f"convert json to yaml: {exc}") from exc

    data = rendered.encode("utf-8")
    if not data.endswith(b"\n"):
        data += b"\n"
    return data


def _reject_constant(name: str) -> float:
    raise ValueError(f"unsupported JSON constant {name}")


def verify_spec(path: str | os.PathLike[str], generated: bytes) -> None:
    """Raise unless the file at ``path`` holds exactly ``generated``."""
    try:
        existing = Path(path).read_bytes()
    except OSError as exc:
        raise OpenAPIGenError(f"read {path}: {exc}") from exc
    if existing != generated:
        raise OpenAPIGenError(
            f"openapi spec drift detected, regenerate with: openapi-gen -out {path}"
        )


def write_spec(path: str | os.PathLike[str], generated: bytes) -> None:
    """Write ``generated`` to ``path``, creating parent directories."""
    target = Path(path)
    directory = target.parent
    try:
        directory.mkdir(mode=0o755, parents=True, exist_ok=True)
    except (OSError, ValueError) as exc:
        raise OpenAPIGenError(f"mkdir {directory}: {exc}") from exc
    try:
        target.write_bytes(generated)
    except (OSError, ValueError) as exc:
        raise OpenAPIGenError(f"write {path}: {exc}") from exc


def run(argv: Sequence[str] | None, document: Any) -> None:
    """Write the rendered spec, or with ``-check`` verify the file is up to date."""
    parser = _ArgumentParser(prog="openapi-gen", allow_abbrev=False)
    parser.add_argument(
        "-out", "--out", dest="out", default="api/openapi.yaml",
        help="path to write OpenAPI YAML",
    )
    parser.add_argument(
        "-check", "--check", dest="check", action="store_true",
        help="fail when generated OpenAPI YAML differs from checked-in file",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        rendered = render_openapi_yaml(document)
    except OpenAPIGenError as exc:
        raise OpenAPIGenError(f"render openapi yaml: {exc}") from exc

    out_path = os.path.normpath(args.out)
    if args.check:
        verify_spec(out_path, rendered)
        print(f"openapi is up to date: {out_path}")
        return

    try:
        write_spec(out_path, rendered)
    except OpenAPIGenError as exc:
        raise OpenAPIGenError(f"write openapi yaml: {exc}") from exc
    print(f"wrote openapi yaml: {out_path}")


# Guard against documents holding non-finite floats that json.dumps(allow_nan=False)
# rejects; kept for readers scanning for the accepted value space.
_FINITE = math.isfinite