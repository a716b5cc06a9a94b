import argparse
import json
import sys
from pathlib import Path

from gaggimate.analysis import analyze_shot
from gaggimate.clients.history import HistoryClient, HistoryRequestError
from gaggimate.config import Settings, get_settings
from gaggimate.core.errors import ShotLogError
from gaggimate.parsing.index import decode_index, index_to_shot_list
from gaggimate.parsing.shot import decode_shot


def _print_json(data) -> None:
    print(json.dumps(data, indent=2))


def _settings_for(args) -> Settings:
    settings = get_settings()
    if getattr(args, "host", None):
        settings = settings.model_copy(update={"host": args.host})
    return settings


def _cmd_index(args) -> int:
    index = decode_index(Path(args.path).read_bytes())
    _print_json([item.to_dict() for item in index_to_shot_list(index)])
    return 0


def _cmd_shot(args) -> int:
    path = Path(args.path)
    shot_id = args.id or path.stem.lstrip("0") or "0"
    shot = decode_shot(path.read_bytes(), shot_id)
    _print_json(analyze_shot(shot, include_full_curve=args.full_curve).to_dict())
    return 0


def _cmd_history(args) -> int:
    client = HistoryClient(_settings_for(args))
    shots = client.list_shots(limit=args.limit, offset=args.offset)
    _print_json([item.to_dict() for item in shots])
    return 0


def _cmd_fetch(args) -> int:
    client = HistoryClient(_settings_for(args))
    shot = client.get_shot(args.shot_id, include_full_curve=args.full_curve)
    if shot is None:
        _print_json({"error": f"Shot with ID '{args.shot_id}' not found", "code": "SHOT_NOT_FOUND"})
        return 1
    _print_json({"shot": shot.to_dict(), "source": client.settings.host})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gaggimate", description="Decode GaggiMate shot history files.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_index = sub.add_parser("index", help="Decode a local index.bin file.")
    p_index.add_argument("path", type=str, help="Path to index.bin.")
    p_index.set_defaults(func=_cmd_index)

    p_shot = sub.add_parser("shot", help="Decode and analyze a local .slog file.")
    p_shot.add_argument("path", type=str, help="Path to the .slog file.")
    p_shot.add_argument("--id", type=str, default=None, help="Shot ID to report (defaults to the file name).")
    p_shot.add_argument("--full-curve", action="store_true", help="Include every sample in the output.")
    p_shot.set_defaults(func=_cmd_shot)

    p_history = sub.add_parser("history", help="List the shot history of a device.")
    p_history.add_argument("--host", type=str, default=None, help="Device host (overrides GAGGIMATE_HOST).")
    p_history.add_argument("--limit", type=int, default=None, help="Maximum number of shots to list.")
    p_history.add_argument("--offset", type=int, default=None, help="Number of shots to skip.")
    p_history.set_defaults(func=_cmd_history)

    p_fetch = sub.add_parser("fetch", help="Fetch and analyze one shot from a device.")
    p_fetch.add_argument("shot_id", type=str, help="The shot ID.")
    p_fetch.add_argument("--host", type=str, default=None, help="Device host (overrides GAGGIMATE_HOST).")
    p_fetch.add_argument("--full-curve", action="store_true", help="Include every sample in the output.")
    p_fetch.set_defaults(func=_cmd_fetch)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (ShotLogError, HistoryRequestError, OSError) as exc:
        _print_json({"error": str(exc)})
        return 1


if __name__ == "__main__":
    sys.exit(main())
