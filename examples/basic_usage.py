import asyncio

from sysstats import SamplingConfig, StatsAggregator, iter_results

# Configure sampling
config = SamplingConfig(interval=2, debug=True)


async def watch(samples: int) -> None:
    results: asyncio.Queue = asyncio.Queue()
    quit = asyncio.Event()
    session = asyncio.create_task(StatsAggregator(config).run(results, quit))

    seen = 0
    async for cpu, mem, swap, disk in iter_results(results):
        print(f"cpu={cpu:.1%} mem={mem:.1%} swap={swap:.1%} disk={disk:.1%}")
        seen += 1
        if seen > samples:
            quit.set()

    await session


asyncio.run(watch(samples=5))
