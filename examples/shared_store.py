"""
Example: Two ledgers sharing a Redis store

Both ledgers subscribe to the same collections; a payment written through
one shows up in the other's snapshot. Requires a Redis server at
DAILYLEDGER_REDIS_URL (default redis://localhost:6379/0).
"""

import asyncio

from dotenv import load_dotenv

load_dotenv()

from dailyledger import Config, PaymentLedger, RedisStorage  # noqa: E402


async def main():
    config = Config.from_env(storage_backend="redis")
    store_a, store_b = RedisStorage(config.redis_url), RedisStorage(config.redis_url)
    device_a = PaymentLedger(store_a, config)
    device_b = PaymentLedger(store_b, config)

    await device_a.start()
    await device_b.start()

    payment = await device_a.submit(agent="Agente 2", amount="320", reference="55120")
    print(f"Device A recorded {payment.reference} ({payment.id})")

    # Give the pub/sub notification a moment to arrive
    await asyncio.sleep(0.5)
    print(f"Device B sees {len(device_b.payments)} payments, total {device_b.stats().total}")

    await device_a.delete(payment.id, confirmed=True)
    await asyncio.sleep(0.5)
    print(f"After delete, device B sees {len(device_b.payments)} payments")

    await device_a.stop()
    await device_b.stop()
    await store_a.close()
    await store_b.close()


if __name__ == "__main__":
    asyncio.run(main())
