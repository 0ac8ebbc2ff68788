# utils/keep_alive.py
import asyncio
import aiohttp
import os
from datetime import datetime
from typing import Optional

DEFAULT_INTERVAL_SECONDS = 600

async def ping_self(url: str, interval: int):
    """Hit /health periodically so a sleeping free-tier instance stays warm"""
    timeout = aiohttp.ClientTimeout(total=30)

    while True:
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{url.rstrip('/')}/health") as response:
                    if response.status == 200:
                        print(f"✅ Keep-alive ping successful at {datetime.now()}")
                    else:
                        print(f"⚠️ Keep-alive ping failed: {response.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            print(f"❌ Keep-alive ping error: {e}")

        await asyncio.sleep(interval)

def start_keep_alive() -> Optional[asyncio.Task]:
    """Start the keep-alive task when RENDER_EXTERNAL_URL is configured"""
    url = os.getenv("RENDER_EXTERNAL_URL")
    if not url:
        return None

    interval = int(os.getenv("KEEP_ALIVE_INTERVAL", DEFAULT_INTERVAL_SECONDS))
    return asyncio.create_task(ping_self(url, interval))
