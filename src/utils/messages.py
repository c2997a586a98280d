from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired when user logged, so the screen can refresh
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired when an item changed in the cart, or new items being added from product search.
    Will trigger a refresh of cart screen

    If posted from outside CartScreen, make sure to post at App level
    """

    bubble = True


class NewOrderMessage(Message):
    """
    Fired when a new order is created.
    Listened to by past orders and the dashboard
    """

    bubble = True


class OrderStatusChangedMessage(Message):
    """
    Fired by the order management screen after a status update
    """

    bubble = True

    def __init__(self, order_id: int, status: str) -> None:
        super().__init__()
        self.order_id = order_id
        self.status = status


class NotificationsPolledMessage(Message):
    """
    Posted at App level every time the notification poll finishes.
    `new_count` is how many unread notifications appeared since the last poll.
    """

    bubble = True

    def __init__(self, unread: int, new_count: int) -> None:
        super().__init__()
        self.unread = unread
        self.new_count = new_count


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
