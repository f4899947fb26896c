"""CLI entry point for OEE calculator sessions."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from typing import List

from common.config import get_settings
from oee_engine.config.engine_config import EngineConfig
from oee_engine.store.in_memory_store import InMemoryMetricsStore

from .oee_runner import OEECalculatorSession

logger = logging.getLogger(__name__)

DEMO_ROOT = "Demo/Asset1"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="OEE calculator (one session per data source)")
    p.add_argument("--tree", help="JSON file with the metrics roots for the in-memory store")
    p.add_argument(
        "--data-source",
        action="append",
        dest="data_sources",
        help="identifier or path of a metrics root (repeatable)",
    )
    p.add_argument("--once", action="store_true", help="run a single tick per session and exit")
    p.add_argument("--interval-ms", type=int, default=None, help="tick interval override")
    p.add_argument("--dump", action="store_true", help="print the metrics tree when finished")
    p.add_argument("--serve-port", type=int, default=None, help="serve the control API for the first session")
    return p


def build_store(tree_file: str | None) -> InMemoryMetricsStore:
    if tree_file:
        return InMemoryMetricsStore.from_json_file(tree_file)
    store = InMemoryMetricsStore()
    store.add_metrics_root(DEMO_ROOT)
    logger.info("No tree file given, using empty demo root %s", DEMO_ROOT)
    return store


def run_once(sessions: List[OEECalculatorSession]) -> int:
    failed = 0
    for session in sessions:
        if not session.set_data_source(session.reference):
            failed += 1
            continue
        result = session.force_recalculate()
        if result is None:
            failed += 1
            continue
        print(json.dumps({"session": session.name, **result.to_dict()}, indent=2, default=str))
    return failed


def main(argv: List[str] | None = None) -> int:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    args = build_parser().parse_args(argv)

    config = EngineConfig.from_env()
    if args.interval_ms is not None:
        config = replace(config, tick_interval_ms=args.interval_ms)

    store = build_store(args.tree or settings.tree_file)
    references = args.data_sources or settings.data_sources or [DEMO_ROOT]

    sessions = [OEECalculatorSession(store, ref, config) for ref in references]
    logger.info("OEE runner started: sessions=%d interval=%dms", len(sessions), config.tick_interval_ms)

    try:
        if args.once:
            return 1 if run_once(sessions) else 0

        started = [s for s in sessions if s.start()]
        if not started:
            logger.error("No session could resolve its data source")
            return 1

        if args.serve_port is not None:
            import uvicorn

            from oee_engine.api import create_app

            uvicorn.run(create_app(started[0]), host="0.0.0.0", port=args.serve_port)
        else:
            while True:
                time.sleep(1.0)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping sessions")
    finally:
        if args.dump:
            for session in sessions:
                if session.root is not None:
                    print(json.dumps({session.name: store.snapshot(session.root)}, indent=2, default=str))
        for session in sessions:
            session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
