"""Status definitions and exceptions for FinanceTracker.

This module provides:
    - Status: enumeration of possible application states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions raised by the store, gateway and subscription layers

Constructing a status exception logs it and emits ``signals.error`` so that the
message reaches the user as a non-blocking notification, whether or not the
exception is re-raised afterwards.
"""
import enum
import logging
from typing import Dict, Optional


class Status(enum.StrEnum):
    """Enumeration of application status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    SettingsNotFound = enum.auto()
    SettingsInvalid = enum.auto()

    # Authentication status
    CredsNotFound = enum.auto()
    CredsInvalid = enum.auto()
    NotAuthenticated = enum.auto()

    # Store status
    StoreUnavailable = enum.auto()
    SubscriptionFailed = enum.auto()
    MutationFailed = enum.auto()

    # Client-side validation
    ValidationFailed = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.SettingsNotFound: 'Could not find the settings file.',
    Status.SettingsInvalid: 'The settings file seems to be incomplete, or contains invalid values.',

    Status.CredsNotFound: 'Could not find the store credentials. Have you set up a service account key?',
    Status.CredsInvalid: 'Could not load the store credentials. Is the service account key valid?',
    Status.NotAuthenticated: 'You are not signed in. Please sign in and try again.',

    Status.StoreUnavailable: 'The document store is unavailable. Please check your connection.',
    Status.SubscriptionFailed: 'Could not refresh the list. Showing the last known records.',
    Status.MutationFailed: 'The change could not be saved. Please try again.',

    Status.ValidationFailed: 'Please check the entered values.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in FinanceTracker.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        self.message = message or self.status_message
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)

        from ..ui.actions import signals
        signals.error.emit(self.message)


class UnknownException(BaseStatusException):
    """Exception for an unknown error during status processing."""
    pass


class SettingsNotFoundException(BaseStatusException):
    """Exception raised when the settings file cannot be found."""
    status = Status.SettingsNotFound


class SettingsInvalidException(BaseStatusException):
    """Exception raised when the settings file is invalid or malformed."""
    status = Status.SettingsInvalid


class CredsNotFoundException(BaseStatusException):
    """Exception raised when the store credentials file cannot be found."""
    status = Status.CredsNotFound


class CredsInvalidException(BaseStatusException):
    """Exception raised when the store credentials cannot be loaded."""
    status = Status.CredsInvalid


class NotAuthenticatedException(BaseStatusException):
    """Exception raised when a mutation is attempted without a signed-in user."""
    status = Status.NotAuthenticated


class StoreUnavailableException(BaseStatusException):
    """Exception raised when the document store client cannot be created."""
    status = Status.StoreUnavailable


class SubscriptionFailedException(BaseStatusException):
    """Exception raised when a live query reports an error."""
    status = Status.SubscriptionFailed


class MutationFailedException(BaseStatusException):
    """Exception raised when the store rejects a create, update or delete."""
    status = Status.MutationFailed


class ValidationException(BaseStatusException):
    """Exception raised when staged form values fail client-side validation.

    Args:
        message (str): What is wrong with the value.
        field (str): The name of the offending field, if any.
    """
    status = Status.ValidationFailed

    def __init__(self, message: str = None, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
