#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from agent_hub.services.conversation import run_conversation
from agent_hub.services.database import connect_store
from agent_hub.services.dispatcher import dispatch
from agent_hub.services.llm import LLMError
from agent_hub.services.tool_registry import build_registry


async def _run(args: argparse.Namespace) -> None:
    registry = build_registry()
    store = await connect_store(args.database)
    try:
        if args.chat:
            try:
                result = await run_conversation([{"role": "user", "content": args.chat}], registry, store)
            except LLMError as exc:
                print(f"Chat failed: {exc}")
                raise SystemExit(1)
            print(f"Tools: {', '.join(call['name'] for call in result.tool_calls) or '-'}")
            print(f"Answer: {result.answer}")
            output = result.structured_data
        else:
            output = await dispatch(registry, store, args.tool, json.loads(args.params))
    finally:
        await store.close()

    print("Output:")
    print(json.dumps(output, indent=2, default=str))


def parse_args() -> argparse.Namespace:
    registry = build_registry()
    parser = argparse.ArgumentParser(description="Run an Agent Hub tool or chat turn from CLI")
    parser.add_argument("tool", nargs="?", choices=registry.names())
    parser.add_argument("--params", default="{}", help="Tool parameters as a JSON object")
    parser.add_argument("--chat", help="Send a chat message instead of calling a tool directly")
    parser.add_argument("--database", help="SQLite file to use instead of DATABASE_PATH")
    args = parser.parse_args()
    if not args.tool and not args.chat:
        parser.error("give a tool name or --chat")
    return args


def main() -> None:
    args = parse_args()
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
