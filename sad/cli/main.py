"""
sad - command line tools for self-addressing records.

Commands:
  sad codes               Print the primitive code table
  sad sniff FILE          Print the version token of a raw record
  sad saidify FILE        Saidify a JSON field map and emit the record bytes
  sad verify FILE...      Decode and verify raw records (exit 1 on any failure)

Global options:
  --config PATH           TOML or JSON config file
  --log-level TEXT        Minimum log level (default WARNING)
  --json-logs             Emit JSON log lines on stderr
  --log-file PATH         Also write JSON log lines to PATH

Examples:
  sad saidify cred.json --code E --kind CBOR --out cred.cbor
  sad verify cred.cbor --ident ACDC
  sad verify *.cbor
  sad sniff cred.cbor
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import List, Optional

import typer

from .. import logging as slog
from ..batch import verify_many
from ..config import Config, load
from ..errors import ConfigError, SadError
from ..matter import MatterCodex, is_digest, lookup
from ..sadder import Sadder
from ..version import __version__
from ..versioning import sniff as sniff_token

app = typer.Typer(
    name="sad",
    help="Self-addressing data: saidify, sniff and verify records",
    no_args_is_help=True,
    add_completion=False,
)


@dataclass
class _State:
    cfg: Config


def _cfg(ctx: typer.Context) -> Config:
    state = ctx.obj
    return state.cfg if isinstance(state, _State) else load()


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        typer.echo(f"Error: cannot read {path}: {e.strerror or e}", err=True)
        raise typer.Exit(2)


def _fail(err: SadError, code: int = 1) -> None:
    typer.echo(f"Error: {err}", err=True)
    raise typer.Exit(code)


def _version_cb(value: bool) -> None:
    if value:
        typer.echo(f"sad {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to a TOML or JSON config file",
        envvar="SAD_CONFIG",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Minimum log level (DEBUG, INFO, WARNING, ERROR)",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit JSON log lines on stderr",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write JSON log lines to this file",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_cb,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Self-addressing data tools.

    Settings resolve as: command-line flags, then SAD_* environment
    variables, then the --config file, then built-in defaults.
    """
    try:
        cfg = load(
            config,
            log_level=log_level,
            log_format="json" if json_logs else None,
        )
    except ConfigError as e:
        _fail(e, code=2)
    slog.configure_from_config(cfg, stream=sys.stderr, file_path=log_file)
    ctx.obj = _State(cfg=cfg)


@app.command()
def codes(
    digests: bool = typer.Option(False, "--digests", help="Only digest codes"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Print the primitive code table (code, name, raw and text sizes)."""
    rows = []
    for f in fields(MatterCodex):
        code = f.default
        if digests and not is_digest(code):
            continue
        raw_len, text_len = lookup(code)
        rows.append(
            {"code": code, "name": f.name, "raw": raw_len, "text": text_len, "digest": is_digest(code)}
        )

    if json_output:
        typer.echo(json.dumps(rows, indent=2))
        return
    typer.echo(f"{'code':<6}{'name':<22}{'raw':>5}{'text':>6}")
    typer.echo("-" * 39)
    for r in rows:
        mark = " *" if r["digest"] else ""
        typer.echo(f"{r['code']:<6}{r['name']:<22}{r['raw']:>5}{r['text']:>6}{mark}")


@app.command()
def sniff(
    file: Path = typer.Argument(..., help="Raw record file"),
) -> None:
    """Print the version token (ident, version, kind, size) of a raw record."""
    try:
        token = sniff_token(_read(file))
    except SadError as e:
        _fail(e)
    typer.echo(
        json.dumps(
            {
                "ident": token.ident,
                "version": f"{token.version.major}.{token.version.minor}",
                "kind": token.kind,
                "size": token.size,
            }
        )
    )


@app.command()
def saidify(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="JSON file holding the field map"),
    code: Optional[str] = typer.Option(None, "--code", "-c", help="Digest code (default from config)"),
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="JSON, CBOR or MGPK (default from config)"),
    label: Optional[str] = typer.Option(None, "--label", "-l", help="SAID field label"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write record bytes here"),
) -> None:
    """
    Compute and embed the SAID of a field map, fixing the version-string size.

    The map must already hold the label and a "v" field. The finished record
    is written to --out, or to stdout when omitted.
    """
    cfg = _cfg(ctx)
    try:
        ked = json.loads(_read(file).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        typer.echo(f"Error: {file} is not JSON: {e}", err=True)
        raise typer.Exit(2)
    if not isinstance(ked, dict):
        typer.echo("Error: top-level JSON value must be an object", err=True)
        raise typer.Exit(2)

    try:
        rec = Sadder.from_ked(
            ked,
            code=code or cfg.default_code,
            kind=(kind or cfg.default_kind).upper(),
            label=label or cfg.label,
        )
    except SadError as e:
        _fail(e)

    if out is not None:
        out.write_bytes(rec.raw)
        typer.echo(rec.said)
    else:
        typer.echo(rec.raw, nl=False)


@app.command()
def verify(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(..., help="Raw record files"),
    ident: Optional[List[str]] = typer.Option(
        None, "--ident", "-i", help="Allowed identity (repeatable; default from config)"
    ),
    label: Optional[str] = typer.Option(None, "--label", "-l", help="SAID field label"),
) -> None:
    """
    Decode raw records, check their identity and verify their SAIDs.

    Files are verified concurrently (max_workers from config). One line per
    file, in argument order: "OK ident kind size said" on stdout, or the
    error on stderr. Exits 1 if any file fails.
    """
    cfg = _cfg(ctx)
    raws = [_read(f) for f in files]
    with slog.trace_scope(component="cli.verify"):
        results = verify_many(
            raws,
            idents=ident or cfg.idents,
            max_workers=cfg.max_workers,
            label=label or cfg.label,
        )

    failed = 0
    for path, res in zip(files, results):
        if res.ok:
            rec = res.sadder
            typer.echo(f"OK {rec.ident} {rec.kind} {rec.size} {rec.said}")
        else:
            failed += 1
            typer.echo(f"Error: {path}: {res.error}", err=True)
    if failed:
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the sad CLI."""
    app()


if __name__ == "__main__":
    main()
