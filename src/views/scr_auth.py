from typing import Literal

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, TabbedContent, TabPane

from utils.messages import UserLoginMessage
from utils.state import SignupForm
from views.base_screen import BaseScreen


class AuthScreen(BaseScreen):
    """
    Sign in and sign up tabs.
    Dismisses with True once a session was started, False on Back.
    """

    SUB_TITLE = "Account"

    def __init__(self, initial: Literal["signin", "signup"] = "signin"):
        super().__init__()
        self.initial = initial

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-auth", initial=f"tab-{self.initial}"):
            with TabPane("Sign In", id="tab-signin"):
                with Vertical(id="div-signin"):
                    yield Label("Email address")
                    yield Input(placeholder="you@example.com", id="input-signin-email")
                    yield Label("Password")
                    yield Input(
                        placeholder="*********", password=True, id="input-signin-pwd"
                    )
                    with Horizontal(classes="div-auth-btns"):
                        yield Button("Back", id="btn-back-signin")
                        yield Button("Show", id="btn-toggle-signin-pwd")
                        yield Button("Login", id="btn-signin-submit", variant="primary")

            with TabPane("Create Account", id="tab-signup"):
                with Vertical(id="div-signup"):
                    with Horizontal(id="div-signup-names"):
                        yield Input(placeholder="First name", id="input-signup-first")
                        yield Input(placeholder="Last name", id="input-signup-last")
                    yield Input(placeholder="Email address", id="input-signup-email")
                    yield Input(
                        placeholder="Password", password=True, id="input-signup-pwd"
                    )
                    yield Input(
                        placeholder="Confirm password",
                        password=True,
                        id="input-signup-confirm",
                    )
                    with Horizontal(classes="div-auth-btns"):
                        yield Button("Back", id="btn-back-signup")
                        yield Button("Show", id="btn-toggle-signup-pwd")
                        yield Button(
                            "Create Account", id="btn-signup-submit", variant="primary"
                        )

    def on_mount(self) -> None:
        if self.initial == "signup":
            self.query_one("#input-signup-first").focus()
        else:
            self.query_one("#input-signin-email").focus()

    @on(TabbedContent.TabActivated)
    def handle_tab_switch(self, event: TabbedContent.TabActivated) -> None:
        # switching forms clears the previous error
        self.state.show("signup" if event.pane.id == "tab-signup" else "signin")

    @on(Button.Pressed, "#btn-back-signin")
    @on(Button.Pressed, "#btn-back-signup")
    def handle_back(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-toggle-signin-pwd")
    def handle_toggle_signin_pwd(self, event: Button.Pressed) -> None:
        self._toggle_password(event.button, "#input-signin-pwd")

    @on(Button.Pressed, "#btn-toggle-signup-pwd")
    def handle_toggle_signup_pwd(self, event: Button.Pressed) -> None:
        self._toggle_password(event.button, "#input-signup-pwd")

    def _toggle_password(self, button: Button, selector: str) -> None:
        field = self.query_one(selector, Input)
        field.password = not field.password
        button.label = "Show" if field.password else "Hide"

    @on(Button.Pressed, "#btn-signin-submit")
    @on(Input.Submitted, "#input-signin-pwd")
    @work(exclusive=True)
    async def handle_signin_submit(self) -> None:
        email = self.query_one("#input-signin-email", Input).value.strip()
        pwd = self.query_one("#input-signin-pwd", Input).value

        if not email or not pwd:
            self.notify("Email or password cannot be empty!", severity="error")
            return

        if await self.state.submit_signin(email, pwd):
            self.app.post_message(UserLoginMessage())
            self.dismiss(True)
        else:
            self.notify(self.state.error_message, severity="error")
            input_pwd = self.query_one("#input-signin-pwd", Input)
            input_pwd.value = ""
            input_pwd.focus()
            input_pwd.add_class("-invalid")

    @on(Button.Pressed, "#btn-signup-submit")
    @on(Input.Submitted, "#input-signup-confirm")
    @work(exclusive=True)
    async def handle_signup_submit(self) -> None:
        form = SignupForm(
            first_name=self.query_one("#input-signup-first", Input).value.strip(),
            last_name=self.query_one("#input-signup-last", Input).value.strip(),
            email=self.query_one("#input-signup-email", Input).value.strip(),
            password=self.query_one("#input-signup-pwd", Input).value,
            confirm_password=self.query_one("#input-signup-confirm", Input).value,
        )

        if await self.state.submit_signup(form):
            self.notify("Account created.")
            self.app.post_message(UserLoginMessage())
            self.dismiss(True)
        else:
            self.notify(self.state.error_message, severity="error")
            if self.state.view == "signin":
                # account exists now, continue on the sign in tab
                self.query_one("#input-signin-email", Input).value = form.email
                self.query_one(TabbedContent).active = "tab-signin"
                self.query_one("#input-signin-pwd", Input).focus()
