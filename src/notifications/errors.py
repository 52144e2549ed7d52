class NotificationError(Exception):
    """A channel could not deliver a message. Never allowed to undo an RSVP write."""

    code = "NOTIFICATION_ERROR"


class EmailNotConfiguredError(NotificationError):
    code = "CHANNEL_NOT_CONFIGURED"

    def __init__(self, message: str = "Email service not configured") -> None:
        super().__init__(message)


class EmailDeliveryError(NotificationError):
    code = "PROVIDER_ERROR"

    def __init__(self, message: str, to_address: str | None = None) -> None:
        self.to_address = to_address
        super().__init__(message)
