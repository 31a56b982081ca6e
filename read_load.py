"""
read_load.py - resolve keys through GET /get_url without following redirects

Usage:
  python read_load.py --base http://127.0.0.1:8000 --in keys_created.jsonl --count 15000 --concurrency 200

A request counts as ok when it answers 303 (the key resolved).
"""
import argparse
import asyncio
import itertools
import json
import time

import httpx


async def _worker(client: httpx.AsyncClient, keys, remaining: list, stats: dict):
    while remaining[0] > 0:
        remaining[0] -= 1
        try:
            r = await client.get("/get_url", params={"key": next(keys)})
            stats[r.status_code] = stats.get(r.status_code, 0) + 1
        except httpx.HTTPError:
            stats["error"] = stats.get("error", 0) + 1


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--in", dest="keys_file", default="keys_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    with open(args.keys_file, encoding="utf-8") as f:
        keys = [json.loads(line)["key"] for line in f if line.strip()]
    if not keys:
        raise SystemExit(f"No keys in {args.keys_file}. Run write_load.py first.")

    cycle = itertools.cycle(keys)
    remaining = [args.count]
    stats: dict = {}

    t0 = time.perf_counter()
    async with httpx.AsyncClient(base_url=args.base, timeout=10, follow_redirects=False) as client:
        await asyncio.gather(*(_worker(client, cycle, remaining, stats) for _ in range(args.concurrency)))
    elapsed = time.perf_counter() - t0

    ok = stats.get(303, 0)
    print(f"get_url: {ok}/{args.count} redirected in {elapsed:.2f}s ({ok / elapsed:.0f} req/s)")
    print(f"status breakdown: {stats}")


if __name__ == "__main__":
    asyncio.run(main())
