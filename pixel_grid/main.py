import sys
import argparse
import logging
from pathlib import Path

from pixel_grid.core.errors import ExportContractError, ExportError, SerializationError
from pixel_grid.core.exporter import ExportFormat, GridData, export_to_file, format_for_path
from pixel_grid.core.history import GridHistory
from pixel_grid.core.renderer import RenderSurface
from pixel_grid.core.serializer import load_history
from pixel_grid.utils.config import SettingsStore
from pixel_grid.utils.helpers import human_readable_size, parse_dimensions, parse_paint_command

logger = logging.getLogger(__name__)


class EditAction(argparse.Action):
    """Collect --paint/--undo/--redo/--reset in the order they were given."""

    def __call__(self, parser, namespace, values, option_string=None):
        edits = list(getattr(namespace, "edits", None) or [])
        edits.append((self.dest, values))
        namespace.edits = edits


def build_settings(args, store: SettingsStore):
    changes = {}
    if args.size:
        changes["rows"], changes["cols"] = parse_dimensions(args.size)
    if args.default_color:
        changes["default_color"] = args.default_color
    if args.cell_size is not None:
        changes["cell_size"] = args.cell_size
    if args.no_grid_lines:
        changes["show_grid_lines"] = False
    if args.color:
        changes["active_color"] = args.color
    return store.update(**changes) if changes else store.settings


def apply_edits(engine: GridHistory, edits, active_color: str):
    for kind, value in edits:
        if kind == "paint":
            row, col, color = parse_paint_command(value, active_color)
            engine.paint(row, col, color)
        elif kind == "undo":
            for _ in range(value):
                engine.undo()
        elif kind == "redo":
            for _ in range(value):
                engine.redo()
        elif kind == "reset":
            engine.reset()


def run_cli(args):
    store = SettingsStore(Path(args.settings) if args.settings else None)
    try:
        settings = build_settings(args, store)
    except ValueError as e:
        print(f"Error: Invalid settings: {e}")
        sys.exit(1)

    engine = GridHistory(settings)
    store.subscribe(engine.apply_settings)

    if args.input:
        try:
            engine.load_snapshot(load_history(args.input))
        except (FileNotFoundError, SerializationError) as e:
            print(f"Error: Failed to load history: {e}")
            sys.exit(1)

    try:
        apply_edits(engine, args.edits or [], settings.active_color)
    except (ValueError, IndexError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    h = engine.history
    print(f"Grid {h.rows}x{h.cols}: {len(h.past)} undo step(s), {len(h.future)} redo step(s)")

    if not args.output:
        return

    try:
        fmt = ExportFormat(args.format) if args.format else format_for_path(args.output)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if fmt is ExportFormat.JSON:
        source = GridData(h)
    else:
        source = RenderSurface.from_history(h, store.settings)

    try:
        out = export_to_file(fmt, source, args.output)
    except (ExportError, ExportContractError, SerializationError, OSError) as e:
        print(f"Error: Failed to export {fmt.value.upper()}: {e}")
        sys.exit(1)
    print(f"Exported {fmt.value.upper()}: {out} ({human_readable_size(out.stat().st_size)})")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Pixel grid editor")
    parser.add_argument("--input", type=str, help="History JSON to start from (default: blank canvas)")
    parser.add_argument("--output", type=str, help="Export path (.png, .svg or .json)")
    parser.add_argument("--format", type=str, choices=[f.value for f in ExportFormat],
                        help="Export format (default: inferred from --output)")
    parser.add_argument("--settings", type=str, help="Settings file (default: ~/.pixel_grid_settings.json)")
    parser.add_argument("--size", type=str, help="Grid size as ROWSxCOLS, e.g. 16x16")
    parser.add_argument("--default-color", type=str, help="Fill color for blank cells (#RRGGBB)")
    parser.add_argument("--color", type=str, help="Active paint color (#RRGGBB)")
    parser.add_argument("--cell-size", type=int, help="Cell size in pixels for image export")
    parser.add_argument("--no-grid-lines", action="store_true", help="Export images without grid lines")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    # Edits, applied in command-line order
    parser.add_argument("--paint", action=EditAction, metavar="ROW,COL[,COLOR]", help="Paint one cell")
    parser.add_argument("--undo", action=EditAction, type=int, nargs="?", const=1, metavar="N", help="Undo N steps")
    parser.add_argument("--redo", action=EditAction, type=int, nargs="?", const=1, metavar="N", help="Redo N steps")
    parser.add_argument("--reset", action=EditAction, nargs=0, help="Clear the grid (undoable)")
    parser.set_defaults(edits=[])

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run_cli(args)


if __name__ == "__main__":
    main()
