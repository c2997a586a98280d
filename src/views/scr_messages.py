from typing import Dict, List, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, Input, MarkdownViewer, OptionList

from client.api_client import ApiError
from views.base_screen import BaseScreen
from views.modal_dialog import FormDialogModal


class MessagesScreen(BaseScreen):
    """
    Conversations on the left (from the inbox), the selected conversation on
    the right. Opening a conversation marks incoming messages read.
    """

    def __init__(self) -> None:
        super().__init__()
        self._partner_id: Optional[int] = None
        self._names: Dict[int, str] = {}

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal():
            with Vertical(id="div-partners"):
                yield OptionList(id="optlist-partners")
                yield Button("New Conversation", id="btn-new-conv")
            with Vertical(id="div-conversation"):
                yield MarkdownViewer(id="md-conversation", show_table_of_contents=False)
                with Horizontal(id="hort-send"):
                    yield Input(placeholder="Type a message...", id="input-message")
                    yield Button("Send", id="btn-send", variant="primary")

    def on_mount(self) -> None:
        self.load_inbox()

    async def _name_of(self, user_id: int) -> str:
        if user_id not in self._names:
            try:
                user = await self.app.state.client.get_user(user_id)
                self._names[user_id] = f"{user['name']} (@{user['username']})"
            except ApiError:
                self._names[user_id] = f"User {user_id}"
        return self._names[user_id]

    @on(ScreenResume)
    @work(exclusive=True, group="inbox")
    async def load_inbox(self) -> None:
        uid = self.app.state.uid
        try:
            inbox = await self.app.state.client.inbox()
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        # newest first, so the first time a partner appears is their latest message
        partners: List[int] = []
        unread: Dict[int, int] = {}
        for m in inbox:
            other = m["receiverId"] if m["senderId"] == uid else m["senderId"]
            if other not in partners:
                partners.append(other)
            if m["receiverId"] == uid and not m["isRead"]:
                unread[other] = unread.get(other, 0) + 1

        opt_list = self.query_one("#optlist-partners", OptionList)
        opt_list.clear_options()
        for pid in partners:
            badge = f" ({unread[pid]} new)" if unread.get(pid) else ""
            opt_list.add_option(f"{pid} {await self._name_of(pid)}{badge}")

    def on_option_list_option_selected(self, message: OptionList.OptionSelected) -> None:
        self._partner_id = int(str(message.option.prompt).split(" ")[0])
        self.load_conversation()

    @work(exclusive=True, group="conversation")
    async def load_conversation(self) -> None:
        if self._partner_id is None:
            return
        try:
            messages = await self.app.state.client.conversation(self._partner_id)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return

        name = await self._name_of(self._partner_id)
        md = f"### Conversation with {name}\n\n"
        if not messages:
            md += "_No messages yet. Say hello!_"
        for m in messages:
            who = "You" if m["senderId"] == self.app.state.uid else name
            when = m["createdAt"][:16].replace("T", " ")
            md += f"**{who}** ({when}): {m['content']}\n\n"
        await self.query_one("#md-conversation", MarkdownViewer).document.update(md)
        self.query_one("#input-message", Input).focus()

    @on(Button.Pressed, "#btn-send")
    @on(Input.Submitted, "#input-message")
    @work(exclusive=True, group="send")
    async def handle_send(self) -> None:
        msg_input = self.query_one("#input-message", Input)
        content = msg_input.value.strip()
        if self._partner_id is None:
            self.notify("Pick a conversation first.", severity="warning")
            return
        if not content:
            return
        try:
            await self.app.state.client.send_message(self._partner_id, content)
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        msg_input.value = ""
        self.load_conversation()
        self.load_inbox()

    @on(Button.Pressed, "#btn-new-conv")
    @work(exclusive=True, group="send")
    async def handle_new_conversation(self) -> None:
        values = await self.app.push_screen_wait(
            FormDialogModal(
                "Start a conversation",
                [("userId", "User ID", ""), ("content", "Message", "")],
                submit_text="Send",
            )
        )
        if not values:
            return
        if not values["userId"].isdigit():
            self.notify("User ID must be a number.", severity="error")
            return
        try:
            await self.app.state.client.send_message(int(values["userId"]), values["content"])
        except ApiError as e:
            self.notify(e.message, severity="error")
            return
        self._partner_id = int(values["userId"])
        self.load_conversation()
        self.load_inbox()
