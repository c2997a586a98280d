from typing import Dict, List, Literal, Optional, Tuple

from typing_extensions import override

from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key, Resize
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from utils.messages import QuitRequestedMessage


class DialogModal(ModalScreen[bool]):
    """
    A simple dialog box,
    """

    VARIANT_MAP: Dict[
        str, Tuple[Literal["primary", "default", "success", "warning", "error"]]
    ] = {
        "default": ("primary", "default"),
        "positive": ("success", "default"),
        "warning": ("warning", "default"),
        "error": ("error", "primary"),
    }

    def __init__(
        self,
        caption: str,
        primary_text: str = "OK",
        secondary_text: str = "",
        tone: Literal["default", "positive", "warning", "error"] = "default",
    ):
        super().__init__()
        self.caption = caption
        self.primary_text = primary_text
        self.secondary_text = secondary_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.secondary_text:
                    yield Button(
                        self.secondary_text,
                        variant=DialogModal.VARIANT_MAP[self.tone][1],
                        id="btn-secondary",
                    )
                yield Button(
                    self.primary_text,
                    variant=DialogModal.VARIANT_MAP[self.tone][0],
                    id="btn-primary",
                )

    def on_mount(self):
        # destructive dialogs focus the safe button
        if not self.secondary_text or not self.tone == "error":
            self.query_one("#btn-primary").focus()
        else:
            self.query_one("#btn-secondary").focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.dismiss(True)
        if event.button.id == "btn-secondary":
            self.dismiss(False)


class SimpleDialogModal(DialogModal):
    def __init__(self, caption: str):
        super().__init__(caption)


class QuitDialogModal(DialogModal):
    def __init__(self):
        super().__init__("Are you sure you want to quit?", "Yes", "No", "error")

    @override
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-primary":
            self.post_message(QuitRequestedMessage())
            self.dismiss(True)
        else:
            self.dismiss(False)


class FormDialogModal(ModalScreen[Optional[Dict[str, str]]]):
    """
    Small form: a caption, a few text inputs and optionally one select.
    Dismisses with {field name: value} on submit, None on cancel.
    """

    def __init__(
        self,
        caption: str,
        fields: List[Tuple[str, str, str]],
        select: Optional[Tuple[str, str, List[str]]] = None,
        submit_text: str = "Submit",
    ) -> None:
        """
        fields: (name, label, initial value) per text input
        select: (name, label, options), the first option is preselected
        """
        super().__init__()
        self.caption = caption
        self.fields = fields
        self.select = select
        self.submit_text = submit_text

    def compose(self) -> ComposeResult:
        with Vertical(id="div-form-dialog"):
            yield Label(self.caption, id="caption")
            if self.select:
                name, label, options = self.select
                yield Label(label)
                yield Select(
                    [(o, o) for o in options],
                    value=options[0],
                    allow_blank=False,
                    id=f"select-{name}",
                )
            for name, label, value in self.fields:
                yield Label(label)
                yield Input(value=value, id=f"input-{name}")
            with Horizontal(id="dialog"):
                yield Button("Cancel", id="btn-secondary")
                yield Button(self.submit_text, id="btn-primary", variant="primary")

    def on_mount(self) -> None:
        inputs = self.query(Input)
        if inputs:
            inputs.first().focus()

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-secondary":
            self.dismiss(None)
            return
        values = {
            name: self.query_one(f"#input-{name}", Input).value.strip()
            for name, _, _ in self.fields
        }
        if self.select:
            values[self.select[0]] = str(
                self.query_one(f"#select-{self.select[0]}", Select).value
            )
        self.dismiss(values)


class ResizeScreenPromptModal(ModalScreen[bool]):
    """
    Shown while the terminal is smaller than the layout needs.
    """

    def __init__(self, min_width: int = 40, min_height: int = 60) -> None:
        super().__init__()
        self.min_width = min_width
        self.min_height = min_height

    def compose(self) -> ComposeResult:
        with Container(id="div-resize"):
            yield Label("Resize to fit the content", id="prompt")

    def on_resize(self, event: Resize) -> None:
        if not (
            event.size.width < self.min_width or event.size.height < self.min_height
        ):
            self.dismiss()
