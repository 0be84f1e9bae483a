# Minimal example of talking to a running fan-press server
import asyncio

import aiohttp

BASE_URL = "http://localhost:3002"


async def main():
    async with aiohttp.ClientSession() as session:
        async with session.ws_connect(f"{BASE_URL}/ws") as ws:
            hello = await ws.receive_json()
            print(f"Connected: {hello['totalRecords']} records on the server")

            # Append a reading; every open socket gets a dataAdded event
            async with session.post(f"{BASE_URL}/api/data", json={"ph": 7.1, "fan": "A"}) as resp:
                print(f"Posted: {await resp.json()}")
            event = await ws.receive_json()
            print(f"Event: {event['type']} (total {event['totalRecords']})")

            # Ask for a full resync
            await ws.send_json({"type": "requestData"})
            snapshot = await ws.receive_json()
            print(f"Snapshot holds {len(snapshot['data'])} records")


if __name__ == "__main__":
    asyncio.run(main())
