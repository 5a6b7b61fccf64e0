import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from dd_core import (
    CompilerConfig,
    DictionaryError,
    EntityStore,
    compile_sources,
    discover_sources,
    dumps_dictionary,
    load_config,
    parse_sources,
    resolve_to_base_type,
    write_dictionary,
)
from dd_core.config import CONFIG_FILENAME
from dd_core.issues import Issue, to_lines

logger = logging.getLogger("dd_cli")

STARTER_DICTIONARY = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE dictionary [
  <!ENTITY Example SYSTEM "example.xml">
]>
<dictionary>
  <base>
    <typedefn type-name="OctetString"/>
    <typedefn type-name="UTF8String" type-parent="OctetString"/>
    <typedefn type-name="Unsigned32"/>
    <typedefn type-name="Enumerated" type-parent="Integer32"/>
    <typedefn type-name="DiameterIdentity" type-parent="OctetString"/>
    <command name="Capabilities-Exchange" code="257" vendor-id="None"/>
    <avp name="Origin-Host" code="264" mandatory="must" may-encrypt="no" protected="may" vendor-bit="mustnot">
      <type type-name="DiameterIdentity"/>
    </avp>
    <avp name="Result-Code" code="268" mandatory="must" may-encrypt="no" protected="may" vendor-bit="mustnot">
      <type type-name="Unsigned32"/>
      <enum name="DIAMETER_SUCCESS" code="2001"/>
    </avp>
  </base>
  &Example;
</dictionary>
"""

STARTER_EXAMPLE = """<?xml version="1.0" encoding="UTF-8"?>
<vendor vendor-id="Example" code="99999" name="Example Vendor"/>
<application id="16777999" name="Example Application">
  <command name="Example-Request" code="9000" vendor-id="Example"/>
  <avp name="Example-Group" code="9001" mandatory="must" vendor-bit="must" vendor-id="Example">
    <grouped>
      <gavp name="Origin-Host"/>
      <gavp name="Result-Code"/>
    </grouped>
  </avp>
</application>
"""


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _print_issues(issues: List[Issue]) -> None:
    for line in to_lines(issues):
        print(line)


def _load_config(args: argparse.Namespace) -> CompilerConfig:
    config = load_config(args.config)
    _configure_logging("DEBUG" if args.verbose else config.log_level)
    return config


def _source(args: argparse.Namespace, config: CompilerConfig) -> str:
    return args.source or config.source


def cmd_init(args: argparse.Namespace) -> int:
    root = Path(args.path).resolve()
    dictionaries = root / "dictionaries"
    dictionaries.mkdir(parents=True, exist_ok=True)

    created = []
    for target, content in (
        (dictionaries / "dictionary.xml", STARTER_DICTIONARY),
        (dictionaries / "example.xml", STARTER_EXAMPLE),
        (
            root / CONFIG_FILENAME,
            "source: dictionaries/dictionary.xml\n"
            "out: dist/dictionary.json\n"
            "indent: 4\n"
            "log_level: WARNING\n",
        ),
    ):
        if not target.exists():
            target.write_text(content, encoding="utf-8")
            created.append(target)

    print(f"Initialized dictionary workspace at {root}")
    for path in created:
        print(f"- {path}")
    return 0


def cmd_compile(args: argparse.Namespace) -> int:
    config = _load_config(args)
    out = args.out or config.out
    indent = config.indent if args.indent is None else args.indent
    dump_store = args.dump_store or config.dump_store

    result = compile_sources(discover_sources(_source(args, config)))

    if dump_store:
        write_dictionary(result.store.snapshot(), dump_store, indent=indent)
        print(f"Wrote entity store: {dump_store}")

    if out == "-":
        print(dumps_dictionary(result.document, indent=indent))
    else:
        write_dictionary(result.document, out, indent=indent)
        print(f"Wrote dictionary: {out}")
    return 0


def cmd_resolve_type(args: argparse.Namespace) -> int:
    config = _load_config(args)
    store = EntityStore()
    parse_sources(discover_sources(_source(args, config)), store)
    print(resolve_to_base_type(store, args.type_name, args.app_id))
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    config = _load_config(args)
    result = compile_sources(discover_sources(_source(args, config)))
    summary = result.summary()

    if args.output_json:
        print(json.dumps({"sources": result.sources, "counts": summary}, indent=2))
    else:
        print(f"Sources: {len(result.sources)}")
        for source in result.sources:
            print(f"  {source}")
        for name, count in summary.items():
            print(f"{name.capitalize()}: {count}")
        grouped = sum(1 for avp in result.document["avps"] if avp.get("type") == "Grouped")
        enumerated = sum(1 for avp in result.document["avps"] if avp.get("enums"))
        print(f"Grouped AVPs: {grouped}")
        print(f"Enumerated AVPs: {enumerated}")
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        nargs="?",
        help="Root dictionary XML or directory of dictionary XML files",
    )
    parser.add_argument(
        "--config", help=f"Path to config file (default: ./{CONFIG_FILENAME})"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dd", description="Diameter dictionary compiler")
    sub = parser.add_subparsers(dest="command", required=True)

    init_parser = sub.add_parser("init", help="Initialize a dictionary workspace")
    init_parser.add_argument("--path", default=".", help="Workspace path")
    init_parser.set_defaults(func=cmd_init)

    compile_parser = sub.add_parser("compile", help="Compile dictionary XML to JSON")
    _add_common(compile_parser)
    compile_parser.add_argument("--out", help="Output JSON path ('-' for stdout)")
    compile_parser.add_argument("--indent", type=int, help="JSON indentation")
    compile_parser.add_argument("--dump-store", help="Also write the raw entity store as JSON")
    compile_parser.set_defaults(func=cmd_compile)

    resolve_parser = sub.add_parser("resolve-type", help="Resolve a type name to its base type")
    resolve_parser.add_argument("type_name", help="Declared type name")
    _add_common(resolve_parser)
    resolve_parser.add_argument("--app-id", default="0", help="Application id to resolve in")
    resolve_parser.set_defaults(func=cmd_resolve_type)

    stats_parser = sub.add_parser("stats", help="Print dictionary statistics")
    _add_common(stats_parser)
    stats_parser.add_argument("--output-json", action="store_true", help="Print stats as JSON")
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except DictionaryError as exc:
        logger.debug("Compilation failed", exc_info=True)
        _print_issues([exc.issue])
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
