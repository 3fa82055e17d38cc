
from __future__ import annotations
import importlib
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console

from tpmhbs import __version__, registry
from tpmhbs.config import Settings, load_settings, parse_log_level
from tpmhbs.errors import ConfigurationError, TPMHBSError
from tpmhbs.identity import read_tpm_info
from tpmhbs.params import SCHEMES
from tpmhbs.projection import SORT_KEYS, resolve_ordering, project_estimates
from tpmhbs.throughput import measure_throughput, total_progress_units

from .report import print_report, schemes_table, write_csv

app = typer.Typer(add_completion=False, help="Estimate hash-based signature performance on a TPM")

log = logging.getLogger(__name__)

_ADAPTER_MODULES = ("tpmhbs_tpm2",)
_SORT_HELP = f"one of: [{', '.join(SORT_KEYS)}]"


def _load_adapters() -> None:
    for mod in _ADAPTER_MODULES:
        try:
            importlib.import_module(mod)
        except ImportError as exc:
            log.warning("device adapter %s unavailable: %s", mod, exc)


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _settings(ctx: typer.Context, verbose: bool = False, **overrides: Any) -> Settings:
    """Resolve settings with the command's flags on top and set up logging."""
    if verbose or (ctx.obj or {}).get("verbose"):
        overrides["log_level"] = "INFO"
    try:
        settings = load_settings(**overrides)
    except ConfigurationError as exc:
        _fail(str(exc))
    level = parse_log_level(settings.log_level)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(level)
    return settings


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tpmhbs version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log measurement details (INFO)."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Print the version and exit."
    ),
) -> None:
    """Measure TPM SHA-256 throughput and project HBS keygen/signing times."""
    ctx.obj = {"verbose": verbose}


def _open_device(name: str, tcti: Optional[str], simulator: bool):
    _load_adapters()
    device_cls = registry.get(name)
    return device_cls(tcti, simulator=simulator)


@app.command()
def estimate(
    ctx: typer.Context,
    device: Optional[str] = typer.Option(None, help="Device backend (default: tpm2, or TPMHBS_DEVICE)."),
    tcti: Optional[str] = typer.Option(None, help="tpm2-tss TCTI configuration, e.g. 'device:/dev/tpmrm0'."),
    simulator: bool = typer.Option(False, "--simulator", help="Use the TPM simulator (mssim TCTI)."),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", "--sort_by", help=_SORT_HELP),
    samples: Optional[int] = typer.Option(None, help="Timed samples per input size (default 10)."),
    output_dir: Optional[Path] = typer.Option(None, help="Directory for the CSV snapshot (default: cwd)."),
    write_csv_file: bool = typer.Option(True, "--csv/--no-csv", help="Write the CSV snapshot."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log measurement details (INFO)."),
) -> None:
    """Measure the device's hash rate and print estimated keygen/signing times."""
    settings = _settings(
        ctx,
        verbose,
        device=device,
        tcti=tcti,
        sort_by=sort_by,
        samples_per_size=samples,
        output_dir=output_dir,
    )
    sort_key = settings.sort_by
    samples_per_size = settings.samples_per_size
    out_dir = settings.output_dir
    try:
        # Reject a bad ordering before spending minutes on the device
        resolve_ordering(sort_key)
        if samples_per_size < 1:
            raise ConfigurationError(f"samples must be at least 1, got {samples_per_size}")
        dev_cm = _open_device(settings.device, settings.tcti, simulator)
    except TPMHBSError as exc:
        _fail(str(exc))

    total = total_progress_units(samples_per_size)
    with dev_cm as dev:
        try:
            tpm_info = read_tpm_info(dev)
        except TPMHBSError as exc:
            _fail(f"could not get TPM info: {exc}")
        log.info("device: %s", tpm_info)
        with typer.progressbar(length=total, label="Measuring SHA256 throughput", file=sys.stderr) as bar:
            seen = [0]

            def _progress(completed: int, _total: int) -> None:
                bar.update(completed - seen[0])
                seen[0] = completed

            try:
                throughput = measure_throughput(dev, samples_per_size, progress_cb=_progress)
            except TPMHBSError as exc:
                _fail(f"could not get SHA256 performance: {exc}")

    try:
        rows = project_estimates(throughput, sort_key)
    except TPMHBSError as exc:
        _fail(str(exc))
    print_report(Console(), tpm_info, throughput, rows)

    if write_csv_file:
        try:
            path = write_csv(rows, tpm_info, out_dir)
        except OSError as exc:
            typer.echo(f"Could not write CSV file to {out_dir}: {exc}", err=True)
        else:
            typer.echo(f"Wrote CSV data to {path}.")


@app.command()
def schemes(
    ctx: typer.Context,
    sort_by: Optional[str] = typer.Option(None, "--sort-by", "--sort_by", help=_SORT_HELP),
) -> None:
    """List the cataloged parameter sets and their work factors (no device needed)."""
    sort_key = _settings(ctx, sort_by=sort_by).sort_by
    try:
        ordering = resolve_ordering(sort_key)
    except ConfigurationError as exc:
        _fail(str(exc))
    # Catalog entries carry the same attribute names the orderings read
    rows = sorted(SCHEMES, key=ordering)
    Console().print(schemes_table(rows))


@app.command()
def info(
    ctx: typer.Context,
    device: Optional[str] = typer.Option(None, help="Device backend (default: tpm2, or TPMHBS_DEVICE)."),
    tcti: Optional[str] = typer.Option(None, help="tpm2-tss TCTI configuration."),
    simulator: bool = typer.Option(False, "--simulator", help="Use the TPM simulator (mssim TCTI)."),
) -> None:
    """Print the device's manufacturer, model, firmware and spec revision."""
    settings = _settings(ctx, device=device, tcti=tcti)
    try:
        with _open_device(settings.device, settings.tcti, simulator) as dev:
            typer.echo(str(read_tpm_info(dev)))
    except TPMHBSError as exc:
        _fail(str(exc))


def app_main():
    app()

if __name__ == "__main__":
    app_main()
