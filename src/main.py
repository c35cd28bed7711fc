"""Command-line entry point for Gemini Chat.

``RUN_MODE=integrated`` (default) serves the proxy and the chat page from one
uvicorn process. ``RUN_MODE=separate`` starts the proxy and the page as two
child processes; the page reaches the proxy through ``API_BASE_URL``.

Reads ``HOST``, ``PORT``, ``UI_PORT`` and ``LOG_LEVEL`` after loading ``.env``.
"""

import asyncio
import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

from src.log import configure_logging

logger = logging.getLogger(__name__)


def _host() -> str:
    return os.getenv("HOST", "0.0.0.0")


def _port() -> int:
    return int(os.getenv("PORT", "8000"))


def run_integrated() -> None:
    """Mount the chat page on the proxy app and serve both on ``PORT``."""
    import uvicorn
    from nicegui import ui

    from src.api.app import create_app
    from src.ui.chat_page import register

    app = create_app()
    port = _port()
    # The page streams from the proxy on this same server.
    os.environ.setdefault("API_BASE_URL", f"http://localhost:{port}")
    register()

    ui.run_with(
        app,
        title="Gemini Chat",
        favicon="💬",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "gemini-chat-secret"),
    )

    logger.info(f"Serving proxy and chat page on http://{_host()}:{port}")
    uvicorn.run(app, host=_host(), port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def child_commands(env: dict[str, str]) -> tuple[list[str], list[str], dict[str, str]]:
    """Build the proxy and page commands for separate mode.

    Returns:
        The proxy command, the page command and the page's environment, in
        which ``API_BASE_URL`` points at the proxy unless already set.
    """
    port = env.get("PORT", "8000")
    api_cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        "src.api.app:app",
        "--host",
        env.get("HOST", "0.0.0.0"),
        "--port",
        port,
    ]
    ui_cmd = [sys.executable, "-m", "src.ui.chat_page"]
    ui_env = dict(env)
    ui_env.setdefault("API_BASE_URL", f"http://localhost:{port}")
    return api_cmd, ui_cmd, ui_env


def run_separate() -> None:
    """Run the proxy and the chat page as two processes until either exits."""
    api_cmd, ui_cmd, ui_env = child_commands(dict(os.environ))

    async def supervise() -> None:
        api_proc = subprocess.Popen(api_cmd)
        ui_proc = subprocess.Popen(ui_cmd, env=ui_env)
        logger.info(f"Proxy pid {api_proc.pid}, chat page pid {ui_proc.pid}")
        try:
            while api_proc.poll() is None and ui_proc.poll() is None:
                await asyncio.sleep(1)
        finally:
            for proc in (api_proc, ui_proc):
                proc.terminate()
                proc.wait()

    try:
        asyncio.run(supervise())
    except KeyboardInterrupt:
        logger.info("Shutting down")


def main() -> None:
    load_dotenv()
    configure_logging()
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting Gemini Chat in {mode} mode")
    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
