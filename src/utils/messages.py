from textual.message import Message


class QuitRequestedMessage(Message):
    """
    Posted by the quit dialog, handled at App level
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Posted after a successful sign in or sign up.
    The landing screen closes itself and the app shows the dashboard.
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    Posted by the dashboard once the user confirmed logging out
    """

    bubble = True


class NewOrderMessage(Message):
    """
    Posted when an order was appended to the signed-in account.
    Dashboard refreshes its counts, order history and activity.
    """

    bubble = True

    def __init__(self, order_id: str) -> None:
        super().__init__()
        self.order_id = order_id
