from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Footer, Header

from utils.state import AppContext
from views.modal_dialog import QuitDialogModal


class BaseScreen(Screen[bool]):
    """
    Inherited by all screens: header, footer and the quit binding.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Quit App", show=True),
    ]

    SUB_TITLE = "Welcome"

    def __init__(self):
        super().__init__()
        self.app.title = "VALENCIRÈ®"
        self.sub_title = self.SUB_TITLE

    @property
    def state(self) -> AppContext:
        return self.app.state

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer(show_command_palette=False)

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
