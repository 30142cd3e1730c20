"""
Basic passwordless usage example.

This example demonstrates the fundamental passwordless operations:
- Registering strategies on a memory store
- Requesting and verifying a one-time token
- Restricting a strategy to some requests
- Using the stateless sealed store
"""

import asyncio
import logging
from datetime import timedelta

from passwordless import (
    CrockfordGenerator,
    EnvelopeJar,
    LogTransport,
    MemoryTokenStore,
    Passwordless,
    PINGenerator,
    RequestContext,
    SealedTokenStore,
    Transport,
)
from passwordless.errors import NotValidForContextError, TokenNotFoundError


class Outbox(Transport):
    """Keeps sent tokens so the example can read them back."""

    def __init__(self):
        self.tokens = {}

    async def send(self, ctx, token, uid, recipient):
        self.tokens[uid] = token


async def basic_example():
    """Demonstrate basic passwordless usage"""
    print("Basic passwordless Example")
    print("=" * 30)

    outbox = Outbox()
    pw = Passwordless(MemoryTokenStore(sweep_interval=30))
    pw.set_transport("email", outbox, CrockfordGenerator(10), timedelta(minutes=30))
    pw.set_transport("log", LogTransport(), PINGenerator(6), timedelta(minutes=5))
    pw.set_transport("sms", outbox, PINGenerator(6), timedelta(minutes=5),
                     predicate=lambda ctx: ctx.get("phone_verified", False))

    try:
        # 1. Request a token by email
        await pw.request_token(None, "email", "alice", "alice@example.com")
        token = outbox.tokens["alice"]
        print(f"✓ Token sent to alice: {token}")

        # 2. Verify it, tolerating case changes made by the user
        valid = await pw.verify_token(None, "alice", token.upper(), strategy="email")
        print(f"✓ Token verified: {valid}")

        # 3. Tokens are single use
        try:
            await pw.verify_token(None, "alice", token)
        except TokenNotFoundError:
            print("✓ Second use rejected")

        # 4. Strategies can refuse a request
        try:
            await pw.request_token(RequestContext(), "sms", "bob", "+15550100")
        except NotValidForContextError as e:
            print(f"✓ SMS refused: {e}")

        print(f"✓ Strategies for verified phones: {sorted(pw.list_strategies(RequestContext(values={'phone_verified': True})))}")

    finally:
        await pw.close()


async def sealed_example():
    """Demonstrate the sealed store"""
    print("\nSealed Store Example")
    print("=" * 30)

    outbox = Outbox()
    store = SealedTokenStore(
        signing_key="example-signing-key-of-32-bytes-or-more",
        auth_key="example-authentication-key",
        encryption_key="example-encryption-key",
    )
    pw = Passwordless(store)
    pw.set_transport("email", outbox, CrockfordGenerator(10), timedelta(minutes=30))

    # The jar plays the browser: it keeps the envelope between requests.
    jar = EnvelopeJar()
    ctx = RequestContext.for_envelope(jar)

    await pw.request_token(ctx, "email", "carol", "carol@example.com")
    print(f"✓ Envelope issued: {jar.get_envelope('passwordless')[:24]}...")

    valid = await pw.verify_token(ctx, "carol", outbox.tokens["carol"])
    print(f"✓ Token verified: {valid}")
    print(f"✓ Envelope cleared: {'passwordless' not in jar}")


async def main():
    logging.basicConfig(level=logging.INFO)
    await basic_example()
    await sealed_example()


if __name__ == "__main__":
    asyncio.run(main())
