from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Button, Label

from views.base_screen import BaseScreen
from views.scr_auth import AuthScreen


class LandingScreen(BaseScreen):
    """
    Entry point for signed out users. Dismisses with True once the user
    signed in or created an account.
    """

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-landing"):
            yield Label("VALENCIRÈ®", id="label-brand")
            yield Label("CRAFTED FOR THE EXTRAORDINARY", id="label-tagline")
            yield Button("Sign In", id="btn-signin", variant="primary")
            yield Button("Create Account", id="btn-signup")

    def on_mount(self) -> None:
        self.state.show("landing")
        self.query_one("#btn-signin").focus()

    @on(Button.Pressed, "#btn-signin")
    def handle_signin(self) -> None:
        self.open_auth("signin")

    @on(Button.Pressed, "#btn-signup")
    def handle_signup(self) -> None:
        self.open_auth("signup")

    @work(exclusive=True)
    async def open_auth(self, view: str) -> None:
        self.state.show(view)
        if await self.app.push_screen_wait(AuthScreen(view)):
            self.dismiss(True)
        else:
            self.state.show("landing")
