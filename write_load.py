"""
write_load.py - register many keys through POST /set_url

Usage:
  python write_load.py --base http://127.0.0.1:8000 --count 2000 --concurrency 100 --out keys_created.jsonl

Each key is "load-<n>" pointing at https://load.example/<n>; the written keys are
saved as JSON lines for read_load.py.
"""
import argparse
import asyncio
import json
import time

import httpx


async def _worker(client: httpx.AsyncClient, queue: asyncio.Queue, written: list):
    while True:
        n = await queue.get()
        key, url = f"load-{n}", f"https://load.example/{n}"
        try:
            r = await client.post("/set_url", json={"key": key, "url": url})
            if r.status_code == 200:
                written.append(key)
        except httpx.HTTPError:
            pass
        finally:
            queue.task_done()


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--out", default="keys_created.jsonl")
    args = parser.parse_args()

    queue: asyncio.Queue = asyncio.Queue()
    for n in range(args.count):
        queue.put_nowait(n)
    written: list = []

    t0 = time.perf_counter()
    async with httpx.AsyncClient(base_url=args.base, timeout=10) as client:
        workers = [asyncio.create_task(_worker(client, queue, written)) for _ in range(args.concurrency)]
        await queue.join()
        for w in workers:
            w.cancel()
    elapsed = time.perf_counter() - t0

    with open(args.out, "w", encoding="utf-8") as out:
        out.writelines(json.dumps({"key": k}) + "\n" for k in written)

    print(f"set_url: {len(written)}/{args.count} ok in {elapsed:.2f}s ({len(written) / elapsed:.0f} req/s)")


if __name__ == "__main__":
    asyncio.run(main())
