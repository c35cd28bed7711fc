"""NiceGUI chat interface streaming replies from the chat proxy."""

import os

from dotenv import load_dotenv
from nicegui import ui

from src.log import configure_logging
from src.models.schemas import Message, Role
from src.ui.conversation import Conversation, FragmentSource
from src.ui.stream_client import send_message_stream

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    body { background: #f3f4f6; min-height: 100vh; }

    .header { background: #2563eb; }

    .message-user {
        background: #3b82f6;
        color: white;
        border-radius: 12px 12px 0 12px;
    }

    .message-model {
        background: #e5e7eb;
        color: #1f2937;
        border-radius: 12px 12px 12px 0;
    }

    .message-incomplete { border: 1px dashed #dc2626; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #2563eb;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""


def render_chat(stream: FragmentSource) -> None:
    """Build the chat page for one client, reading replies from ``stream``."""
    ui.add_head_html(CUSTOM_CSS)

    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.input
    send_btn: ui.button
    reply_labels: dict[str, ui.label] = {}

    def render_message(msg: Message) -> None:
        is_user = msg.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-model"
        if msg.incomplete:
            bubble += " message-incomplete"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes(f"max-w-[70%] px-4 py-3 shadow-md {bubble}"):
                reply_labels[msg.id] = ui.label(msg.content).classes(
                    "text-sm break-words whitespace-pre-wrap"
                )
                if msg.incomplete:
                    ui.label("This answer may be incomplete.").classes(
                        "text-[10px] text-red-600 italic"
                    )

    def render_typing_indicator() -> None:
        with (
            ui.row().classes("w-full justify-start"),
            ui.element("div").classes("message-model px-4 py-3"),
            ui.row().classes("gap-1"),
        ):
            for _ in range(3):
                ui.element("div").classes("typing-dot")

    def render_welcome() -> None:
        with ui.column().classes("w-full h-64 items-center justify-center gap-2 text-center"):
            ui.label("Welcome to Gemini Chat!").classes("text-lg text-gray-500")
            ui.label("Type a message below to start a conversation.").classes(
                "text-sm text-gray-400"
            )
            ui.icon("forum").classes("text-6xl text-gray-300 mt-4")

    def refresh_messages() -> None:
        messages_container.clear()
        reply_labels.clear()
        with messages_container:
            if not conversation.messages and not conversation.is_loading:
                render_welcome()
            for msg in conversation.messages:
                render_message(msg)
            if conversation.is_loading and conversation.messages[-1].role == Role.USER:
                render_typing_indicator()
        input_field.set_enabled(not conversation.is_loading)
        send_btn.set_enabled(not conversation.is_loading)
        if conversation.is_loading:
            send_btn.props("loading")
        else:
            send_btn.props(remove="loading")
        scroll_to_latest()

    def update_reply(msg: Message) -> None:
        reply_labels[msg.id].set_text(msg.content)
        scroll_to_latest()

    def scroll_to_latest() -> None:
        scroll_area.scroll_to(percent=1.0)

    conversation = Conversation(
        stream=stream,
        on_change=refresh_messages,
        on_fragment=update_reply,
        on_scroll=scroll_to_latest,
    )

    async def send_message() -> None:
        text = input_field.value or ""
        if not conversation.can_submit(text):
            return
        input_field.value = ""
        await conversation.submit(text)

    def new_chat() -> None:
        conversation.clear()

    # === UI Layout ===
    with ui.column().classes("w-full h-screen gap-0"):
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between shadow-md"):
            ui.label("Gemini Chat App").classes("text-xl font-bold text-white")
            ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        with ui.scroll_area().classes("flex-grow w-full") as scroll_area:
            with ui.column().classes("w-full max-w-3xl mx-auto p-4"):
                messages_container = ui.column().classes("w-full gap-2")

        with ui.row().classes("w-full p-4 gap-2 items-center bg-white border-t shadow-lg"):
            input_field = (
                ui.input(placeholder="Type your message...")
                .props("outlined dense")
                .classes("flex-grow")
                .mark("message-input")
                .on("keydown.enter", send_message)
            )
            send_btn = (
                ui.button("Send", on_click=send_message)
                .props("unelevated color=primary")
                .mark("send-button")
            )

    refresh_messages()


def register(stream: FragmentSource = send_message_stream) -> None:
    """Register the chat page at '/'.

    Args:
        stream: Fragment source for replies; the HTTP stream client by default.
    """

    @ui.page("/")
    def chat_page() -> None:
        render_chat(stream)


def main() -> None:
    """Serve the page on its own; replies come from the proxy at ``API_BASE_URL``."""
    load_dotenv()
    configure_logging()
    register()
    ui.run(title="Gemini Chat", port=int(os.getenv("UI_PORT", "8080")), reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
