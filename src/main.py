from typing import Optional

from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from db.errors import PersistenceError
from utils.logger import get_logger
from utils.messages import QuitRequestedMessage, UserLoginMessage, UserLogoutMessage
from utils.state import AppContext
from views.modal_dialog import DialogModal
from views.scr_dashboard import DashboardScreen
from views.scr_landing import LandingScreen

_logger = get_logger(__name__)


class ValencireApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    CSS_PATH = "views/styles/app.tcss"

    state: AppContext

    def __init__(self, state: Optional[AppContext] = None):
        super().__init__()
        self.state = state or AppContext.from_store()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.startup()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @work
    async def startup(self):
        try:
            await self.state.start()
        except PersistenceError as e:
            # quit without touching the stored data
            _logger.error(f"Could not load accounts: {e.message}")
            await self.push_screen_wait(
                DialogModal(f"{e.message} The app will now close.", tone="error")
            )
            self.exit(return_code=1)
            return
        self.main_flow()

    @on(UserLoginMessage)
    def handle_user_login(self):
        user = self.state.current_user()
        if user:
            self.notify(f"Welcome, {user.first_name}!")

    @on(UserLogoutMessage)
    @work(exclusive=True, group="logout")
    async def handle_user_logout(self):
        if not await self.state.logout():
            self.notify(self.state.error_message, severity="error")
            return
        if isinstance(self.screen, DashboardScreen):
            self.pop_screen()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        # the session is kept so the next start resumes it
        self.exit()

    @work
    async def main_flow(self):
        if self.state.current_user() is None:
            await self.push_screen_wait(LandingScreen())
        self.state.show("dashboard")
        await self.push_screen(DashboardScreen())


def run() -> None:
    ValencireApp().run()


if __name__ == "__main__":
    run()
