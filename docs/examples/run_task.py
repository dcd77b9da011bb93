import asyncio
import os
import sys

from dotenv import load_dotenv
from anthropic import AsyncAnthropic

from agenttime.agent_core import CompletionEvent, ToolExecutor, default_handlers, default_registry, execute_task
from agenttime.integrations import GmailProvider, GoogleCalendarProvider, TokenStore, WebClient
from agenttime.llm_impl import AnthropicProvider

# Load environment variables
load_dotenv()


async def main() -> None:
    """
    Run one task with a research agent and print the streamed events.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        print("Error: ANTHROPIC_API_KEY not found in environment variables.")
        return

    task = " ".join(sys.argv[1:]) or "Find the three most recent releases of Python and summarize what changed."
    registry = default_registry()
    executor = ToolExecutor(
        default_handlers(mail=GmailProvider(), calendar=GoogleCalendarProvider(), web=WebClient()),
        registry=registry,
    )
    tokens = TokenStore(
        os.getenv("TOKEN_FILE", ".tokens.json"),
        client_id=os.getenv("GOOGLE_CLIENT_ID"),
        client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
    )

    events = execute_task(
        task,
        "Research Bot",
        "Research Analyst",
        os.getenv("USER_EMAIL"),
        provider=AnthropicProvider(AsyncAnthropic(api_key=api_key)),
        executor=executor,
        registry=registry,
        credentials=tokens,
    )
    async for event in events:
        if isinstance(event, CompletionEvent):
            print(f"\nDone (success={event.success}){': ' + event.error if event.error else ''}")
        else:
            print(f"[{event.severity.value}] {event.message}")


if __name__ == "__main__":
    asyncio.run(main())
