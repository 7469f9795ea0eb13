#!/usr/bin/env python3
"""
floorsketch/main.py

Command line driver for the path builder. It replays a small text script of
drawing commands, one per line, the same way a sketch editor would feed
clicks and keyboard entries into the engine:

    activate
    start 100 100          # first vertex at a canvas point
    move 10 0              # 10 units to the right
    move 10 90             # 10 units up
    point 100 20           # next vertex at a canvas point
    close
    resume 1 1             # reopen polygon 1 at its vertex p1
    undo
    deactivate

Blank lines and everything after ``#`` are ignored. Every result is logged;
a summary of the finalized polygons is printed at the end and can be
exported to CSV, PNG and PDF.

    python3 -m floorsketch room.txt --csv rooms.csv --preview rooms.png
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .app_io.export_mod import export_csv, export_pdf
from .core.config import GeometryConfig
from .core.errors import FloorSketchError
from .features.editing.draw import BuilderState, PathBuilder, PlacementResult
from .file_io import load_config
from .visualization.preview import render_preview

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# command -> (min args, max args)
COMMANDS = {
    'start': (2, 2),
    'move': (2, 2),
    'point': (2, 2),
    'undo': (0, 0),
    'close': (0, 0),
    'resume': (1, 2),
    'activate': (0, 0),
    'deactivate': (0, 0),
}


class ScriptError(FloorSketchError, ValueError):
    """A script line that cannot be parsed."""


@dataclass(frozen=True)
class Command:
    line_no: int
    name: str
    args: Tuple[float, ...] = ()


def parse_line(line: str, line_no: int) -> Optional[Command]:
    text = line.split('#', 1)[0].strip()
    if not text:
        return None
    name, *raw_args = text.split()
    name = name.lower()
    if name not in COMMANDS:
        raise ScriptError(f"line {line_no}: unknown command {name!r}")
    lo, hi = COMMANDS[name]
    if not lo <= len(raw_args) <= hi:
        raise ScriptError(f"line {line_no}: {name} takes {lo if lo == hi else f'{lo}-{hi}'} argument(s)")
    try:
        if name == 'resume':
            args: Tuple[float, ...] = tuple(int(a) for a in raw_args)
        else:
            args = tuple(float(a) for a in raw_args)
    except ValueError as e:
        raise ScriptError(f"line {line_no}: {e}") from e
    return Command(line_no, name, args)


def parse_script(lines: Iterable[str]) -> List[Command]:
    commands = []
    for line_no, line in enumerate(lines, start=1):
        cmd = parse_line(line, line_no)
        if cmd is not None:
            commands.append(cmd)
    return commands


def _log_result(cmd: Command, result: PlacementResult) -> None:
    if not result.accepted:
        logger.warning(f"line {cmd.line_no}: {cmd.name} rejected ({result.code.value}): {result.validation.reason}")
        return
    if result.polygon is not None:
        suffix = " after repair" if result.repaired else ""
        logger.info(f"line {cmd.line_no}: closed polygon {result.polygon.id}{suffix}")
    elif result.vertex is not None:
        v = result.vertex
        logger.info(f"line {cmd.line_no}: {result.status.value} {v.name} at ({v.x:.1f}, {v.y:.1f})")
    for warning in result.warnings:
        logger.warning(f"line {cmd.line_no}: {warning.reason}")


def run_command(builder: PathBuilder, cmd: Command) -> None:
    """Apply one command; engine state errors propagate."""
    if cmd.name == 'activate':
        builder.activate()
    elif cmd.name == 'deactivate':
        builder.deactivate()
    elif cmd.name == 'undo':
        removed = builder.undo()
        if removed is None:
            logger.info(f"line {cmd.line_no}: nothing to undo")
    elif cmd.name == 'start':
        if builder.state is BuilderState.IDLE:
            builder.activate()
        _log_result(cmd, builder.place_first_vertex(cmd.args))
    elif cmd.name == 'move':
        _log_result(cmd, builder.place_next_vertex(*cmd.args))
    elif cmd.name == 'point':
        _log_result(cmd, builder.place_vertex_at(cmd.args))
    elif cmd.name == 'close':
        _log_result(cmd, builder.close())
    elif cmd.name == 'resume':
        if builder.state is BuilderState.IDLE:
            builder.activate()
        if builder.state is not BuilderState.AWAITING_RESUME_SELECTION:
            builder.begin_resume()
        index = int(cmd.args[0])
        polygon_id = int(cmd.args[1]) if len(cmd.args) > 1 else None
        path = builder.select_resume_vertex(index, polygon_id)
        logger.info(f"line {cmd.line_no}: resumed with {len(path)} vertices")


def replay(builder: PathBuilder, commands: Sequence[Command]) -> int:
    """Run ``commands`` in order; returns the number that raised an engine error."""
    failures = 0
    for cmd in commands:
        try:
            run_command(builder, cmd)
        except (FloorSketchError, KeyError) as e:
            failures += 1
            logger.error(f"line {cmd.line_no}: {cmd.name} failed: {e}")
    return failures


def format_summary(builder: PathBuilder) -> str:
    unit = builder.config.unit
    lines = [f"{'id':>4}  {'vertices':>8}  {'area (sq ' + unit + ')':>14}  {'perimeter (' + unit + ')':>15}  name"]
    total = 0.0
    for poly in builder.polygons:
        total += poly.area
        lines.append(f"{poly.id:>4}  {len(poly.vertices):>8}  {poly.area:>14.2f}  "
                     f"{poly.perimeter:>15.2f}  {poly.metadata.get('name', '')}")
    lines.append(f"{len(builder.polygons)} polygon(s), total area {total:.2f} sq {unit}")
    if builder.open_path:
        lines.append(f"open path: {', '.join(v.name for v in builder.open_path)}")
    return '\n'.join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='floorsketch', description="Replay a floor-plan drawing script.")
    parser.add_argument('script', help="Command script, or '-' for stdin")
    parser.add_argument('--config', help="Geometry configuration (JSON)")
    parser.add_argument('--csv', help="Export finalized polygons to this CSV file")
    parser.add_argument('--preview', help="Write a PNG preview to this file")
    parser.add_argument('--pdf', help="Write a one-page PDF preview to this file")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    try:
        config = load_config(args.config) if args.config else GeometryConfig()
        if args.script == '-':
            commands = parse_script(sys.stdin)
        else:
            with open(args.script, 'r', encoding='utf-8') as f:
                commands = parse_script(f)
    except (FloorSketchError, OSError) as e:
        logger.error(str(e))
        return 2

    builder = PathBuilder(config)
    failures = replay(builder, commands)
    print(format_summary(builder))

    try:
        if args.csv:
            export_csv(builder.polygons, args.csv, config.unit)
        if args.preview:
            render_preview(builder.snapshot(), config).save(args.preview)
            logger.info(f"Preview written to {args.preview}")
        if args.pdf:
            export_pdf(builder.snapshot(), config, args.pdf)
    except OSError as e:
        logger.error(f"Export failed: {e}")
        return 1
    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
