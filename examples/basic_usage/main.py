#!/usr/bin/env python3
"""
Basic usage - redislog demo application

Run modes:
  python main.py                               # Sync delivery to localhost:6379
  python main.py --async --queue-capacity 100  # Background delivery
  python main.py --format v1 --key my_key      # Logstash v1 envelopes
  python main.py --count 1000 --async          # Flood the queue
"""

import argparse
import logging
import sys

from redislog import InitConnectFailed, RedisLogHandler, RedisHook

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

log = logging.getLogger("demo")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ship log lines to a Redis list")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=6379)
    parser.add_argument("--key", default="my_redis_key")
    parser.add_argument("--format", default="v0", help="v0 or v1")
    parser.add_argument("--level", default="info")
    parser.add_argument("--async", dest="async_mode", action="store_true")
    parser.add_argument("--queue-capacity", type=int, default=1000)
    parser.add_argument("--count", type=int, default=1, help="Repeat the demo lines N times")
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    try:
        hook = RedisHook(
            args.host,
            args.port,
            args.key,
            format=args.format,
            level=args.level,
            async_mode=args.async_mode,
            queue_capacity=args.queue_capacity,
        )
    except InitConnectFailed as e:
        log.error(f"Redis hook not installed: {e}")
        return 1

    handler = RedisLogHandler(hook)
    logging.getLogger().addHandler(handler)

    # When the hook is installed, these lines are also pushed to Redis
    for _ in range(args.count):
        log.info("just some info logging...")
        log.info("and with fields", extra={"animal": "walrus", "number": 1, "size": 10})

    logging.getLogger().removeHandler(handler)
    handler.close()

    stats = hook.stats
    print(
        f"fired={stats.events_fired} delivered={stats.events_delivered} "
        f"dropped={stats.events_dropped} failed={stats.events_failed}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
