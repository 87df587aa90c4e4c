"""E2E test configuration and fixtures."""

import multiprocessing
import time
from typing import Generator

import httpx
import pytest
import uvicorn


def is_server_running(port: int = 8080) -> bool:
    """Check if a server is running on the specified port by checking the /health endpoint."""
    try:
        response = httpx.get(f"http://localhost:{port}/health", timeout=2)
        return response.status_code == 200
    except (httpx.RequestError, httpx.ConnectTimeout):
        return False


@pytest.fixture(scope="session")
def server_port() -> int:
    """Get the port for the test server."""
    return 8080


def run_server(port: int) -> None:
    """Run the uvicorn server in a separate process."""
    uvicorn.run("pickleai.app:app", host="0.0.0.0", port=port, log_level="info")


@pytest.fixture(scope="session")
def ensure_llm_server() -> None:
    """Ensure the external LLM server is running."""
    if not is_server_running(8000):
        pytest.skip(
            "External LLM server at localhost:8000 is not running. "
            "Please start it before running e2e tests."
        )


@pytest.fixture(scope="session")
def chat_server(ensure_llm_server: None, server_port: int) -> Generator[int, None, None]:
    """Start the PickleAI server unless one is already listening.

    Tears the process down after the test session. Yields the port.
    """
    if is_server_running(server_port):
        print(f"Server is already running on port {server_port}.")
        yield server_port
        return

    print(f"Starting PickleAI server on port {server_port}...")
    process = multiprocessing.Process(target=run_server, args=(server_port,))
    process.start()

    server_started = False
    for _ in range(30):
        if is_server_running(server_port):
            server_started = True
            break
        time.sleep(1)

        if not process.is_alive():
            pytest.fail("Server process crashed during startup.", pytrace=False)

    if not server_started:
        process.terminate()
        pytest.fail("PickleAI server did not start within 30 seconds.", pytrace=False)

    yield server_port

    print("Tearing down PickleAI server...")
    process.terminate()
    process.join(timeout=10)
    if process.is_alive():
        process.kill()
        process.join()


@pytest.fixture
def base_url(chat_server: int) -> str:
    """Base URL for the PickleAI API."""
    return f"http://localhost:{chat_server}"
