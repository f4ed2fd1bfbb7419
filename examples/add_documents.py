"""
Add documents to the knowledge base and try a few questions.

Requires OPENAI_API_KEY and DATABASE_URL (environment or .env).
"""

import asyncio

from pollinet_kb import ConversationManager, RAGPipeline, load_config, set_log_level


OVERVIEW = """
Pollinet: Decentralized Bluetooth Mesh SDK for Offline Solana Transactions

Pollinet is a decentralized SDK and runtime enabling Solana transactions to be
distributed opportunistically over Bluetooth Low Energy (BLE) mesh networks.
Transactions are created offline, propagated across peer devices, and eventually
submitted to the Solana blockchain by any gateway node with internet connectivity.

Key Features:
- Offline-first: Transactions work without constant internet connectivity
- BLE Mesh Network: Peer-to-peer transaction relay across devices
- Store-and-Forward: Caching for resilient delivery in offline environments
- Nonce Accounts: Extended transaction lifespan beyond recent blockhash limits
- LZ4 Compression: 30-70% size reduction for efficient bandwidth usage
"""

TECHNOLOGY = """
Pollinet Technology Architecture

- Devices advertise their presence and capabilities (e.g. "CAN_SUBMIT_SOLANA")
- Peers scan for nearby devices advertising the same service UUID
- Nodes connect as both Central and Peripheral for bi-directional relay
- Clusters form locally (~30 meters range), bridges connect clusters
"""


async def main():
    config = load_config()
    set_log_level(config.log_level)

    pipeline = RAGPipeline.from_config(config)
    await pipeline.initialize()
    print("Vector table ready")

    try:
        for name, text, category in [
            ("pollinet_overview", OVERVIEW, "general"),
            ("pollinet_technology", TECHNOLOGY, "technology"),
        ]:
            chunks = await pipeline.ingest(name, text, {"source": "whitepaper", "category": category})
            print(f"Added {name} with {chunks} chunks")

        print(f"Knowledge base holds {await pipeline.count_chunks()} chunks\n")

        conversations = ConversationManager(max_history=config.max_conversation_history)
        for question in [
            "What is Pollinet?",
            "How far apart can two relaying devices be?",
            "What's a good pasta recipe?",
        ]:
            history = await conversations.get_history("demo")
            answer = await pipeline.respond(question, history)
            await conversations.add_user_message("demo", question)
            await conversations.add_assistant_message("demo", answer)

            print(f"Q: {question}")
            print(f"A: {answer}\n")
    finally:
        await pipeline.close()


if __name__ == "__main__":
    asyncio.run(main())
