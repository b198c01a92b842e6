import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence, Tuple

from flashing_core import (
    CatalogError,
    FoldCatalog,
    Line,
    create_tapered_diagram,
    fold_points,
    format_angle,
    format_length,
    geometry_info,
    layout_line_labels,
    load_fold_catalog,
    update_segment_length,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_taper(values: Optional[List[str]]) -> List[Tuple[int, str]]:
    edits: List[Tuple[int, str]] = []
    for value in values or []:
        index, sep, length = value.partition("=")
        if not sep or not index.strip().isdigit():
            logger.warning("Ignoring taper edit %r (expected INDEX=LENGTH)", value)
            continue
        edits.append((int(index), length.strip()))
    return edits


def _read_lines(path: str) -> List[Line]:
    with open(path, encoding="utf-8") as fin:
        document = json.load(fin)
    records = document.get("lines", []) if isinstance(document, dict) else document
    return [Line.from_record(record) for record in records]


def _print_line(line: Line, catalog: Optional[FoldCatalog], show_labels: bool) -> None:
    info = geometry_info(line)
    print(f"Line {line.id}:")
    print(f"  points: {len(line.points)}")
    print(f"  total length: {format_length(info.total_length)}")
    for segment in info.segments:
        print(f"  segment {segment.index}: {format_length(segment.length)}")
    for angle in info.angles:
        print(f"  angle at {angle.index}: {format_angle(angle.angle)}")

    for end in ("start", "end"):
        state = line.fold(end)
        if state is None:
            continue
        name = state.selected_template_id
        if catalog is not None and state.selected_template_id in catalog:
            name = catalog.get(state.selected_template_id).display_name
        chain = fold_points(line, end)
        coords = ", ".join(f"({p.x:.3f}, {p.y:.3f})" for p in chain.points)
        print(f"  {end} fold {name}: {coords if chain.applicable else 'not applicable'}")

    if show_labels:
        offsets = layout_line_labels(line)
        print("  label offsets:")
        for key in sorted(offsets):
            offset = offsets[key]
            print(f"    {key}: ({offset.dx:.2f}, {offset.dy:.2f})")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Inspect dimensioned polyline drawings")
    parser.add_argument("path", help="Path to a JSON document with a 'lines' list")
    parser.add_argument("--catalog", help="Path to a JSON fold template catalog")
    parser.add_argument(
        "--labels",
        action="store_true",
        help="Resolve label placement and print the offsets",
    )
    parser.add_argument(
        "--taper",
        action="append",
        metavar="INDEX=LENGTH",
        help="Create a tapered diagram from the first line and set a segment length (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    catalog: Optional[FoldCatalog] = None
    try:
        if args.catalog:
            catalog = load_fold_catalog(args.catalog)
        lines = _read_lines(args.path)
    except (OSError, json.JSONDecodeError, CatalogError, KeyError, TypeError) as exc:
        logger.error("Cannot load input: %s", exc)
        raise SystemExit(1) from exc

    logger.info("Loaded %d line(s) from %s", len(lines), args.path)
    for line in lines:
        _print_line(line, catalog, args.labels)

    taper_edits = _parse_taper(args.taper)
    if args.taper is not None:
        source = next((line for line in lines if len(line.points) >= 2), None)
        diagram = create_tapered_diagram(source) if source is not None else None
        if diagram is None:
            logger.error("No line with at least two points to taper")
            raise SystemExit(1)
        for index, length in taper_edits:
            diagram = update_segment_length(diagram, index, length)
        print(f"Tapered diagram from {diagram.original_line_id}:")
        for segment in diagram.segments:
            print(
                f"  segment: {format_length(segment.original_length)} -> {format_length(segment.tapered_length)}"
            )
        for point in diagram.points:
            print(f"  ({point.x:.3f}, {point.y:.3f})")


if __name__ == "__main__":
    main(sys.argv[1:])
