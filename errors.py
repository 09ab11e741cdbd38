class BookingStoreError(Exception):
    """Base class for errors raised by the accessors."""


class StorageUnavailableError(BookingStoreError, EnvironmentError):
    """A write was attempted with no persistent store configured."""


class DuplicateEmailError(BookingStoreError):
    def __init__(self, email: str) -> None:
        super().__init__("User with this email already exists")
        self.email = email


class InvalidCredentialsError(BookingStoreError):
    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class NotFoundError(BookingStoreError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.record_id = record_id
