"""Command-line entry point.

  skit-engine parse-script SCENE.txt --world world.json --location medbay
  skit-engine parse-request "[REQUEST: ...]"
  skit-engine evaluate "[REQUEST: ...]" --world world.json
  skit-engine serve --port 13013
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from skit_engine.models import WorldState
from skit_engine.requests import can_fulfill, describe_requirement, describe_reward, parse_request_tag
from skit_engine.script import parse_script

HOST = "127.0.0.1"
PORT = 13013


def _load_world(path: Path | None) -> WorldState:
    if path is None:
        return WorldState()
    return WorldState.model_validate_json(path.read_text(encoding="utf-8"))


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2))


def _cmd_parse_script(args: argparse.Namespace) -> int:
    world = _load_world(args.world)
    result = parse_script(
        _read_text(args.file),
        world.present_at(args.location),
        roster=world.participants.values(),
        factions=world.factions,
    )
    _print_json(result.model_dump(mode="json"))
    return 0


def _cmd_parse_request(args: argparse.Namespace) -> int:
    request = parse_request_tag(args.tag)
    if request is None:
        print(f"Not a valid REQUEST tag: {args.tag}", file=sys.stderr)
        return 1
    _print_json(request.model_dump(mode="json"))
    return 0


def _cmd_evaluate(args: argparse.Namespace) -> int:
    request = parse_request_tag(args.tag)
    if request is None:
        print(f"Not a valid REQUEST tag: {args.tag}", file=sys.stderr)
        return 1
    world = _load_world(args.world)
    _print_json({
        "faction": request.faction_name,
        "requirement": describe_requirement(request.requirement, world),
        "reward": describe_reward(request.reward),
        "can_fulfill": can_fulfill(request.requirement, world),
    })
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("skit_engine.api:create_app", factory=True, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skit-engine", description="Scene script and request tag tools")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse-script", help="Parse generated scene text into entries")
    p.add_argument("file", help="Scene text file, or - for stdin")
    p.add_argument("--world", type=Path, default=None, help="World snapshot JSON")
    p.add_argument("--location", default="", help="Location id whose participants are present")
    p.set_defaults(func=_cmd_parse_script)

    p = sub.add_parser("parse-request", help="Parse a [REQUEST: ...] tag")
    p.add_argument("tag")
    p.set_defaults(func=_cmd_parse_request)

    p = sub.add_parser("evaluate", help="Check whether a request can currently be fulfilled")
    p.add_argument("tag")
    p.add_argument("--world", type=Path, required=True, help="World snapshot JSON")
    p.set_defaults(func=_cmd_evaluate)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default=HOST)
    p.add_argument("--port", type=int, default=PORT)
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
