
from __future__ import annotations
"""Table and CSV rendering for estimate reports.

The table goes to the terminal with human-readable durations; the CSV keeps
durations in seconds so it can be loaded back for comparison across devices.
"""

import csv
import math
import pathlib
import re
from typing import Any, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from tpmhbs import __version__
from tpmhbs.identity import TpmInfo
from tpmhbs.metrics import ThroughputEstimate
from tpmhbs.params import HBSSchemeParams
from tpmhbs.projection import EstimateRow

TABLE_HEADER = ("Friendly Name", "W (bits)", "Signatures", "Sig Size", "Est. Keygen", "Est. Signing")
CSV_HEADER = ("Friendly Name", "W (bits)", "Signatures", "Sig Size", "Est. Keygen (s)", "Est. Signing (s)")


def format_runtime(seconds: Any) -> Optional[str]:
    try:
        sec = float(seconds)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(sec) or sec < 0.0:
        return None
    if sec < 1e-3:
        return f"{sec * 1e6:.0f}µs"
    if sec < 1.0:
        return f"{sec * 1000.0:.0f}ms"
    if sec < 120.0:
        return f"{sec:.1f}s"
    minutes = sec / 60.0
    if minutes < 120.0:
        return f"{minutes:.1f}m"
    hours = sec / 3600.0
    if hours < 48.0:
        return f"{hours:.1f}h"
    days = sec / 86400.0
    if days < 730.0:
        return f"{days:.1f}d"
    years = sec / 31557600.0
    return f"{years:.1f}y"


def estimates_table(rows: Sequence[EstimateRow]) -> Table:
    table = Table()
    for idx, title in enumerate(TABLE_HEADER):
        table.add_column(title, no_wrap=True, justify="left" if idx == 0 else "right")
    for row in rows:
        table.add_row(
            row.friendly_name,
            str(row.W),
            str(row.num_signatures),
            str(row.sig_size),
            format_runtime(row.keygen_seconds) or "-",
            format_runtime(row.signing_seconds) or "-",
        )
    return table


def schemes_table(schemes: Sequence[HBSSchemeParams]) -> Table:
    table = Table()
    for idx, title in enumerate(("Friendly Name", "W (bits)", "H", "Signatures", "Sig Size", "Keygen Work", "Sig Work")):
        table.add_column(title, no_wrap=True, justify="left" if idx == 0 else "right")
    for scheme in schemes:
        table.add_row(
            scheme.friendly_name,
            str(scheme.W),
            str(scheme.H),
            str(scheme.num_signatures),
            str(scheme.sig_size),
            str(scheme.keygen_work),
            str(scheme.sig_work),
        )
    return table


def print_report(
    console: Console,
    info: TpmInfo,
    estimate: ThroughputEstimate,
    rows: Sequence[EstimateRow],
) -> None:
    console.print(f"tpmhbs version {__version__}")
    console.print(str(info), highlight=False, markup=False)
    console.print(f"Estimated (SHA256) hashes per second: {estimate.hashes_per_second:.1f}", highlight=False)
    if estimate.micros_per_block is not None and estimate.overhead_micros is not None:
        console.print(
            f"Fitted cost: {estimate.micros_per_block:.3f} us/block + {estimate.overhead_micros:.1f} us/call",
            highlight=False,
        )
    console.print(estimates_table(rows))


def _sanitize(component: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", component).strip("_")
    return cleaned or "unknown"


def csv_filename(info: TpmInfo) -> str:
    return f"tpmhbs.{__version__}.{_sanitize(info.manufacturer)}.{_sanitize(info.model)}.csv"


def csv_rows(rows: Sequence[EstimateRow]) -> List[List[Any]]:
    return [
        [
            row.friendly_name,
            row.W,
            row.num_signatures,
            row.sig_size,
            f"{row.keygen_seconds:.6g}",
            f"{row.signing_seconds:.6g}",
        ]
        for row in rows
    ]


def write_csv(rows: Sequence[EstimateRow], info: TpmInfo, output_dir: pathlib.Path) -> pathlib.Path:
    path = pathlib.Path(output_dir) / csv_filename(info)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(csv_rows(rows))
    return path
