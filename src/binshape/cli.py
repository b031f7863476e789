from __future__ import annotations
import argparse, json, logging

from .binary.errors import ParseError
from .binary.loader import available_shapes, load_by_name
from .log import setup_logging

log = logging.getLogger("binshape")


def cmd_shapes(args):
    for tag in available_shapes():
        print(tag)
    return 0


def cmd_parse(args):
    try:
        shape = load_by_name(args.shape, args.input)
    except (ParseError, OSError) as e:
        log.error("cannot parse %s as %s: %s", args.input, args.shape, e)
        return 1

    out = shape.record().model_dump(mode="json")
    if args.offsets:
        out = {"record": out, "offsets": {e.name: e.offset for e in shape.fields()}}
    print(json.dumps(out, indent=2))
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="binshape", description="Parse binary files as declared shapes")
    p.add_argument(
        "--log-level",
        default=None,
        help="CRITICAL|ERROR|WARNING|INFO|DEBUG (or env BINSHAPE_LOG_LEVEL)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("shapes", help="list the shapes files can be parsed as")
    sp.set_defaults(func=cmd_shapes)

    sp = sub.add_parser("parse", help="parse a file and print its fields as JSON")
    sp.add_argument("shape", help="shape tag, see `binshape shapes`")
    sp.add_argument("input", help="path to the file")
    sp.add_argument("--offsets", action="store_true", help="also print the offset each field was read at")
    sp.set_defaults(func=cmd_parse)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    setup_logging(ns.log_level)
    return ns.func(ns)


if __name__ == "__main__":
    raise SystemExit(main())
