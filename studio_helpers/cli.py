"""
Studio One Helpers CLI - thin entrypoint over the StudioHelpers facade.

Commands:
- import {commands,plugins,presets} FILE
- status, clear, categories, split
- commands / plugins / presets: list stored data
- report {commands,plugins,presets,stickers}: export PDFs
- macro {plugin,preset}: export .studioonemacro files
- stickers {init,show,size}: manage the sticker layout

Exit Codes:
===========
- 0: Success
- 1: Validation error (bad arguments, invalid layout)
- 2: Operation failed (import or export refused or failed)
- 4: System error (file not found, store cannot be opened)
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from studio_helpers import __version__
from studio_helpers.app import OperationOutcome, StudioHelpers
from studio_helpers.config import Settings, configure_logging, load_settings
from studio_helpers.errors import LayoutError, StorageError
from studio_helpers.plugins.service import EXACT_FIELDS as PLUGIN_EXACT_FIELDS, PluginsService
from studio_helpers.presets.extractor import SqlitePresetReader
from studio_helpers.reports.delivery import FileDeliverySink
from studio_helpers.storage.kv import SqliteKeyValueStore


EXIT_OK = 0
EXIT_VALIDATION = 1
EXIT_FAILED = 2
EXIT_SYSTEM = 4

DEFAULT_PAGE_SIZE = 50


def _read_input(path_arg: str) -> Optional[bytes]:
    path = Path(path_arg).expanduser()
    if not path.is_file():
        print(f"ERROR: File not found: {path}", file=sys.stderr)
        return None
    return path.read_bytes()


def _report(outcome: OperationOutcome) -> int:
    if outcome.ok:
        print(f"✓ {outcome.message}")
        if outcome.path is not None:
            print(f"  {outcome.path}")
        return EXIT_OK
    print(f"✗ {outcome.message}", file=sys.stderr)
    return EXIT_FAILED


def _print_rows(rows: List[List[str]]) -> None:
    for row in rows:
        print("\t".join(row))


# =============================================================================
# Commands
# =============================================================================

def cmd_import(app: StudioHelpers, args: argparse.Namespace) -> int:
    data = _read_input(args.file)
    if data is None:
        return EXIT_SYSTEM

    importers = {
        "commands": app.import_commands,
        "plugins": app.import_plugins,
        "presets": app.import_presets,
    }
    return _report(importers[args.kind](data))


def cmd_status(app: StudioHelpers, args: argparse.Namespace) -> int:
    status = app.status()
    print(f"Commands: {status.commands or 'not imported'}")
    print(f"Plugins:  {status.plugins or 'not imported'}")
    print(f"Presets:  {status.presets or 'not imported'}")
    if status.categories:
        print(f"  Categories: {', '.join(status.categories)}")
    return EXIT_OK


def cmd_clear(app: StudioHelpers, args: argparse.Namespace) -> int:
    return _report(app.clear_all())


def cmd_categories(app: StudioHelpers, args: argparse.Namespace) -> int:
    for category in app.queries.available_categories():
        print(category)
    return EXIT_OK


def cmd_split(app: StudioHelpers, args: argparse.Namespace) -> int:
    return _report(app.split_presets())


def cmd_commands(app: StudioHelpers, args: argparse.Namespace) -> int:
    commands = app.commands.load()
    if not commands:
        print("No commands data available.", file=sys.stderr)
        return EXIT_FAILED
    _print_rows([[c.section_name, c.command_name, c.shortcut] for c in commands])
    return EXIT_OK


def cmd_plugins(app: StudioHelpers, args: argparse.Namespace) -> int:
    if args.lookup:
        lookup = app.plugin_names
        lookup.rebuild()
        _print_rows([list(pair) for pair in zip(lookup.class_ids(), lookup.names())])
        print(f"{lookup.count} plugin mappings", file=sys.stderr)
        return EXIT_OK

    plugins = app.plugins.load()
    if plugins is None:
        print("No plugins data available.", file=sys.stderr)
        return EXIT_FAILED
    plugins = PluginsService.filter(plugins, args.vst3, args.search, args.field, args.value)
    _print_rows([
        [p.category, p.name or "", p.vendor, p.version, p.class_id or ""] for p in plugins
    ])
    return EXIT_OK


def cmd_presets(app: StudioHelpers, args: argparse.Namespace) -> int:
    try:
        page = app.queries.query(
            args.category,
            args.page,
            args.page_size,
            search_text=args.search,
            exact_field=args.field,
            exact_value=args.value,
            sort_field=args.sort,
            sort_ascending=not args.desc,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_VALIDATION

    _print_rows([
        [p.vendor or "", p.class_id or "", p.title or "", p.creator or "", p.sub_folder or ""]
        for p in page.items
    ])
    print(f"{len(page.items)} of {page.total_count} presets", file=sys.stderr)
    return EXIT_OK


def cmd_report(app: StudioHelpers, args: argparse.Namespace) -> int:
    if args.kind == "commands":
        return _report(app.export_commands_report())
    if args.kind == "plugins":
        return _report(app.export_plugins_report(args.vst3, args.search))
    if args.kind == "presets":
        if not args.category:
            print("ERROR: --category is required for preset reports", file=sys.stderr)
            return EXIT_VALIDATION
        return _report(app.export_presets_report(
            args.category,
            search_text=args.search,
            sort_field=args.sort,
            sort_ascending=not args.desc,
        ))
    return _report(app.export_stickers_report())


def cmd_macro_plugin(app: StudioHelpers, args: argparse.Namespace) -> int:
    return _report(app.export_plugin_macro(
        args.class_id, args.title, args.group, args.description, args.preset,
    ))


def cmd_macro_preset(app: StudioHelpers, args: argparse.Namespace) -> int:
    return _report(app.export_preset_macro(
        args.category,
        args.preset_title,
        args.title,
        args.group,
        args.description,
        args.mode,
        args.class_id,
    ))


def cmd_stickers_init(app: StudioHelpers, args: argparse.Namespace) -> int:
    try:
        buttons = app.stickers.create_default_layout(args.rows, args.columns)
        app.stickers.save_layout(buttons, args.rows, args.columns)
    except LayoutError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_VALIDATION
    print(f"✓ Created {args.rows}x{args.columns} sticker layout")
    return EXIT_OK


def cmd_stickers_show(app: StudioHelpers, args: argparse.Namespace) -> int:
    layout = app.stickers.load_layout()
    size = app.stickers.load_button_size()
    print(f"Grid: {layout.grid_rows}x{layout.grid_columns}")
    print(f"Button size: {size.width:g}x{size.height:g} {size.unit}")
    for button in layout.buttons:
        if button.is_assigned:
            print(f"  ({button.row}, {button.column}) {button.display_text}")
    return EXIT_OK


def cmd_stickers_size(app: StudioHelpers, args: argparse.Namespace) -> int:
    try:
        size = app.stickers.save_button_size(args.width, args.height, args.unit)
    except LayoutError as e:
        print(f"✗ {e}", file=sys.stderr)
        return EXIT_VALIDATION
    print(f"✓ Button size set to {size.width:g}x{size.height:g} {size.unit}")
    return EXIT_OK


# =============================================================================
# Parser
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studio-helpers",
        description="Studio One Helpers - shortcuts, plugins, presets, macros and stickers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to execute")

    # Import
    parser_import = subparsers.add_parser("import", help="Import an exported Studio One file")
    parser_import.add_argument("kind", choices=["commands", "plugins", "presets"])
    parser_import.add_argument("file", help="ShortcutsExport.html, plugin settings XML or DataStore.db")
    parser_import.set_defaults(func=cmd_import)

    subparsers.add_parser("status", help="Show what has been imported").set_defaults(func=cmd_status)
    subparsers.add_parser("clear", help="Remove all stored data").set_defaults(func=cmd_clear)
    subparsers.add_parser(
        "categories", help="List preset categories with data"
    ).set_defaults(func=cmd_categories)
    subparsers.add_parser(
        "split", help="Re-split combined preset data into categories"
    ).set_defaults(func=cmd_split)
    subparsers.add_parser("commands", help="List stored commands").set_defaults(func=cmd_commands)

    # Plugins
    parser_plugins = subparsers.add_parser("plugins", help="List stored plugins")
    parser_plugins.add_argument("--vst3", action="store_true", help="Only VST3 plugins")
    parser_plugins.add_argument("--search", help="Case-insensitive text search")
    parser_plugins.add_argument("--field", choices=sorted(PLUGIN_EXACT_FIELDS))
    parser_plugins.add_argument("--value", help="Exact value for --field")
    parser_plugins.add_argument(
        "--lookup", action="store_true", help="Print the class id to name lookup instead"
    )
    parser_plugins.set_defaults(func=cmd_plugins)

    # Presets
    parser_presets = subparsers.add_parser("presets", help="List one category's presets")
    parser_presets.add_argument("category")
    parser_presets.add_argument("--page", type=int, default=0)
    parser_presets.add_argument("--page-size", type=int, default=DEFAULT_PAGE_SIZE)
    parser_presets.add_argument("--search", help="Case-insensitive text search")
    parser_presets.add_argument("--field", help="Exact-match field (Vendor, ClassId, Title, ...)")
    parser_presets.add_argument("--value", help="Exact value for --field")
    parser_presets.add_argument("--sort", help="Sort field")
    parser_presets.add_argument("--desc", action="store_true", help="Sort descending")
    parser_presets.set_defaults(func=cmd_presets)

    # Reports
    parser_report = subparsers.add_parser("report", help="Export a PDF report")
    parser_report.add_argument("kind", choices=["commands", "plugins", "presets", "stickers"])
    parser_report.add_argument("--category", help="Preset category (presets only)")
    parser_report.add_argument("--vst3", action="store_true", help="Only VST3 plugins (plugins only)")
    parser_report.add_argument("--search", help="Case-insensitive text search")
    parser_report.add_argument("--sort", help="Sort field (presets only)")
    parser_report.add_argument("--desc", action="store_true", help="Sort descending")
    parser_report.set_defaults(func=cmd_report)

    # Macros
    parser_macro = subparsers.add_parser("macro", help="Export a Studio One macro")
    macro_sub = parser_macro.add_subparsers(dest="macro_kind", required=True)

    parser_macro_plugin = macro_sub.add_parser("plugin", help="Macro that adds a plugin")
    parser_macro_plugin.add_argument("class_id")
    parser_macro_plugin.add_argument("--title", required=True)
    parser_macro_plugin.add_argument("--group", required=True)
    parser_macro_plugin.add_argument("--description")
    parser_macro_plugin.add_argument("--preset", help="Preset title to load after adding")
    parser_macro_plugin.set_defaults(func=cmd_macro_plugin)

    parser_macro_preset = macro_sub.add_parser("preset", help="Macro that applies a preset")
    parser_macro_preset.add_argument("category")
    parser_macro_preset.add_argument("preset_title")
    parser_macro_preset.add_argument("--title", required=True)
    parser_macro_preset.add_argument("--group", required=True)
    parser_macro_preset.add_argument("--description")
    parser_macro_preset.add_argument("--mode", type=int, default=0, help="Insert mode (FXChain only)")
    parser_macro_preset.add_argument("--class-id", help="Disambiguate presets sharing a title")
    parser_macro_preset.set_defaults(func=cmd_macro_preset)

    # Stickers
    parser_stickers = subparsers.add_parser("stickers", help="Controller sticker layout")
    stickers_sub = parser_stickers.add_subparsers(dest="stickers_kind", required=True)

    parser_init = stickers_sub.add_parser("init", help="Save an empty layout")
    parser_init.add_argument("rows", type=int)
    parser_init.add_argument("columns", type=int)
    parser_init.set_defaults(func=cmd_stickers_init)

    stickers_sub.add_parser("show", help="Show the stored layout").set_defaults(func=cmd_stickers_show)

    parser_size = stickers_sub.add_parser("size", help="Set the sticker cell size")
    parser_size.add_argument("width", type=float)
    parser_size.add_argument("height", type=float)
    parser_size.add_argument("--unit", default="mm", help="mm or cm")
    parser_size.set_defaults(func=cmd_stickers_size)

    return parser


def _make_app(settings: Settings, store: SqliteKeyValueStore) -> StudioHelpers:
    return StudioHelpers(
        store,
        sink=FileDeliverySink(settings.output_dir),
        preset_reader=SqlitePresetReader(settings.preset_query),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entrypoint.

    Parses arguments, opens the store and dispatches to a command.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(settings.log_level)

    handler: Callable[[StudioHelpers, argparse.Namespace], int] = args.func
    try:
        with SqliteKeyValueStore(settings.store_path, capacity=settings.quota_chars) as store:
            return handler(_make_app(settings, store), args)
    except StorageError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return EXIT_SYSTEM
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
