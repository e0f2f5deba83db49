"""
PROCSIM — Command File Runner
===============================
Feed a command file through the dispatcher and watch the scheduler work.

Each simulated tick dispatches at most one ready item, advances the clock
and prints the report.  ``sleep <id> <ticks>`` lines are scheduler
directives, applied in file order, not payloads.

Run:
    python scripts/run_commands.py scripts/sample_commands.txt --ticks 8
"""

from __future__ import annotations

import argparse
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from procsim.core.command_parser import parse_script  # noqa: E402
from procsim.core.config import get_settings  # noqa: E402
from procsim.core.logging import configure_logging  # noqa: E402
from procsim.core.runtime import close_runtime, init_runtime  # noqa: E402
from procsim.services.report import render_snapshot  # noqa: E402

SLEEP_DIRECTIVE = "sleep"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("path", help="command file, one command per line")
    parser.add_argument("--ticks", type=int, default=10)
    parser.add_argument(
        "--interval",
        type=float,
        default=0.0,
        help="wall-clock pause between ticks (seconds)",
    )
    parser.add_argument("--bottom-first", action="store_true")
    args = parser.parse_args(argv)

    configure_logging()
    with open(args.path, encoding="utf-8") as fh:
        requests = parse_script(fh.read())

    runtime = init_runtime(start_monitor=False)
    top_first = get_settings().report_top_first and not args.bottom_first
    try:
        for request in requests:
            payload = request.payload
            if payload.command == SLEEP_DIRECTIVE and len(payload.args) == 2:
                item_id, ticks = (int(a) for a in payload.args)
                result = runtime.scheduler.sleep(item_id, ticks)
                if not result.success:
                    print(f"[!] line {request.line_no}: {result.error}")
                continue
            runtime.dispatcher.submit_request(request)

        print(render_snapshot(runtime.scheduler.snapshot(top_first=top_first)))
        for _ in range(args.ticks):
            result = runtime.dispatcher.run_next()
            if result is not None and not result.detached:
                status = result.output if result.success else f"error: {result.error}"
                print(f"\n[{result.item_id}] {status}")
            report = runtime.scheduler.tick()
            print(f"\n== tick {report.tick} ==")
            print(render_snapshot(runtime.scheduler.snapshot(top_first=top_first)))
            if args.interval:
                time.sleep(args.interval)

        for result in runtime.dispatcher.wait_background():
            status = result.output if result.success else f"error: {result.error}"
            print(f"[{result.item_id}&] {status}")
    finally:
        close_runtime()
    return 0


if __name__ == "__main__":
    sys.exit(main())
