from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import load_settings

from src.break_scheduler.break_scheduler.common.datetime_utils import FixedClock, SystemClock
from src.break_scheduler.break_scheduler.common.validators import optional_instant, require_positive_int
from src.break_scheduler.break_scheduler.container import build_container
from src.break_scheduler.break_scheduler.core.exceptions import ValidationError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run one break reminder pass (or evaluate one agent).")
    parser.add_argument("--at", help="ISO-8601 instant to evaluate at (default: now, in TIME_ZONE)")
    parser.add_argument("--agent", help="Only evaluate this agent id; prints what is due without sending")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = load_settings()
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    zone = SystemClock(getattr(settings, "TIME_ZONE", "Asia/Manila")).zone
    try:
        at = optional_instant(args.at, zone)
        agent_id = require_positive_int(args.agent, "--agent") if args.agent is not None else None
    except ValidationError as e:
        parser.error(str(e))

    clock = FixedClock(at, zone=zone) if at is not None else SystemClock(zone)

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        time_zone=zone.key,
        workers=int(getattr(settings, "REMINDER_WORKERS", 4)),
        tick_timeout=float(getattr(settings, "REMINDER_TICK_TIMEOUT_SECONDS", 30)),
        clock=clock,
    )

    if agent_id is not None:
        due = container.reminder_service.evaluate_agent(agent_id)
        print(json.dumps([d.as_dict() for d in due], indent=2, ensure_ascii=False))
        return 0

    dispatched = container.reminder_service.run_once()
    print(f"OK: dispatched {dispatched} notification(s) at {clock.now().isoformat()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
