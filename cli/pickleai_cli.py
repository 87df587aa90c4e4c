"""Main CLI loop for interactive chat."""

import json
import logging
import sys
from typing import TextIO

from .client import ChatAPIClient, ChatAPIError
from .config import CLIConfig

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q")
CLEAR_COMMAND = "/clear"
CONTEXT_COMMAND = "/context"


class PickleAICLI:
    """Interactive CLI for the PickleAI API."""

    def __init__(
        self,
        config: CLIConfig,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        client: ChatAPIClient | None = None,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        config
            CLI configuration.
        input_stream
            Input stream for user input (default: stdin).
        output_stream
            Output stream for responses (default: stdout).
        client
            API client; one is built from ``config`` when omitted.
        """
        self.config = config
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.client = client or ChatAPIClient(config)
        self.session_id: str | None = None
        self.seen_messages = 0
        self.last_session: dict = {}

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        try:
            self._print_welcome()
            await self._open_session()
            while True:
                try:
                    query = self._get_user_input()
                    if not query.strip():
                        continue

                    command = query.strip().lower()
                    if command in EXIT_COMMANDS:
                        self._print("Goodbye!\n")
                        break
                    if command == CLEAR_COMMAND:
                        await self._clear()
                        continue
                    if command == CONTEXT_COMMAND:
                        self._print_context()
                        continue

                    await self._process_query(query)

                except KeyboardInterrupt:
                    self._print("\n\nInterrupted. Use 'exit' or 'quit' to exit.\n")
                except EOFError:
                    self._print("\nGoodbye!\n")
                    break
        finally:
            if self.session_id is not None:
                try:
                    await self.client.delete_session(self.session_id)
                except ChatAPIError as e:
                    logger.debug(f"Could not delete session: {e}")
            await self.client.close()

    async def _open_session(self) -> None:
        session = await self.client.create_session()
        self.session_id = session["session_id"]
        self._show_new_messages(session)

    async def _clear(self) -> None:
        session = await self.client.clear_messages(self.session_id)
        self.seen_messages = 0
        self.last_session = session
        self._print("Conversation cleared.\n\n")

    async def _process_query(self, query: str) -> None:
        """Process a single user query."""
        try:
            session = await self.client.send_message(self.session_id, query)
        except ChatAPIError as e:
            self._print(f"\n❌ Error: {e}\n\n")
            return

        self._show_new_messages(session)
        if session.get("error"):
            self._print(f"❌ Error: {session['error']}\n\n")

    def _show_new_messages(self, session: dict) -> None:
        messages = session.get("messages", [])
        for message in messages[self.seen_messages :]:
            if message["role"] == "assistant":
                self._print(f"\nPickleAI: {message['content']}\n\n")
        self.seen_messages = len(messages)
        self.last_session = session

    def _print_context(self) -> None:
        context = {
            key: value
            for key, value in self.last_session.get("user_context", {}).items()
            if value is not None
        }
        category = self.last_session.get("conversation_category")
        self._print(f"Topic: {category or 'none yet'}\n")
        self._print(f"Context: {json.dumps(context, indent=2)}\n\n")

    def _get_user_input(self) -> str:
        """Get user input from the input stream."""
        self._print("> ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        """Print welcome message."""
        self._print("PickleAI CLI - Interactive Chat Interface\n")
        self._print(f"Connected to: {self.config.sessions_url}\n")
        self._print(
            "Type your message and press Enter. "
            f"'{CLEAR_COMMAND}' resets the chat, '{CONTEXT_COMMAND}' shows what "
            "PickleAI knows about you, 'exit' quits.\n"
        )

    def _print(self, text: str) -> None:
        """Print text to output stream."""
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(
    host: str = "localhost",
    port: int = 8080,
    api_path: str = "/api/v1",
    user_id: str | None = "cli-user",
    debug: bool = False,
) -> None:
    """Main entry point for the CLI.

    Parameters
    ----------
    host
        Server host.
    port
        Server port.
    api_path
        API prefix.
    user_id
        Caller id; ``None`` sends messages without one.
    debug
        Enable debug logging.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config = CLIConfig(host=host, port=port, api_path=api_path, user_id=user_id)

    cli = PickleAICLI(config)
    try:
        await cli.run()
    except ChatAPIError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
