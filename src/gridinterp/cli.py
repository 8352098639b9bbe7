"""Command-line evaluation of a tabulated grid at query points."""

from __future__ import annotations

import argparse
import json
import math
from typing import Sequence

from .config import BACKENDS, BATCH_ERROR_POLICIES, OUT_OF_BOUNDS_POLICIES, InterpConfig
from .factory import METHODS, make_interpolator


def _parse_point(text: str) -> list[float]:
    try:
        return [float(v) for v in text.split(",") if v.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid point {text!r}: {exc}") from exc


def _load_table(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        table = json.load(f)
    if "axes" not in table or "values" not in table:
        raise ValueError(f"{path}: table must define 'axes' and 'values'")
    return table


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Interpolate a rectilinear grid table at query points.")
    ap.add_argument("table", help="JSON file with 'axes', 'values' and optionally 'points'")
    ap.add_argument("--point", action="append", type=_parse_point, default=[], help="Query point x0,x1,... (repeatable)")
    ap.add_argument("--method", choices=sorted(METHODS), default="linear")
    ap.add_argument("--backend", choices=BACKENDS, default="numpy")
    ap.add_argument("--out-of-bounds", choices=OUT_OF_BOUNDS_POLICIES, default="extrapolate")
    ap.add_argument("--batch-errors", choices=BATCH_ERROR_POLICIES, default="nan")
    ap.add_argument("--workers", type=int, default=1)
    ap.add_argument("--profile-timing", action="store_true")
    return ap


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    table = _load_table(args.table)
    cfg = InterpConfig(
        out_of_bounds=args.out_of_bounds,
        batch_errors=args.batch_errors,
        backend=args.backend,
        workers=args.workers,
        profile_timing=args.profile_timing,
    )
    interp = make_interpolator(table["axes"], table["values"], method=args.method, config=cfg)
    points = list(table.get("points", [])) + args.point
    res = interp.evaluate_batch_report(points)
    payload = {
        "method": interp.method,
        "values": [None if math.isnan(v) else v for v in res.values.tolist()],
        "errors": {str(i): str(exc) for i, exc in res.errors.items()},
    }
    print(json.dumps(payload, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
