#!/usr/bin/env python3
"""
Run one chat action against a JSON Canvas file and write the result back.

    python scripts/chat_canvas.py notes.canvas 3f2a9c... [more node ids]
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from canvaschat.config import load_settings  # noqa: E402
from canvaschat.errors import ChatError  # noqa: E402
from canvaschat.services.chat import handle_chat  # noqa: E402
from canvaschat.services.graph import GraphStore  # noqa: E402


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument("canvas", help="path to a .canvas file")
    ap.add_argument("node_ids", nargs="+", help="ids of the nodes to answer")
    ap.add_argument("--model", default=None)
    ap.add_argument("--api-url", default=None)
    ap.add_argument("--max-tokens", type=int, default=None)
    ap.add_argument("--debug", action="store_true", default=None)
    ap.add_argument("--dry-run", action="store_true", help="do not write the canvas back")
    args = ap.parse_args(argv)

    settings = load_settings(
        model=args.model,
        api_url=args.api_url,
        max_tokens=args.max_tokens,
        debug=args.debug,
    )
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = GraphStore()
    stats = store.reload(args.canvas)
    print(f"Loaded {stats['nodes']} nodes, {stats['edges']} edges from {args.canvas}")

    try:
        store.set_selection(args.node_ids)
        outcomes = asyncio.run(handle_chat(store, settings))
    except (ChatError, KeyError) as e:
        print(f"Error: {e}")
        return 1

    for o in outcomes:
        if o.ok:
            print(f"{o.node_id}: answered -> {o.response_node_id}")
        else:
            print(f"{o.node_id}: Error: {o.error}")

    if not args.dry_run:
        store.save(args.canvas)
    return 0 if all(o.ok for o in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
