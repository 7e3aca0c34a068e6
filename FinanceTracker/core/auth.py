"""
Session identity and store credential management.

The identity provider is external: whatever signs the user in hands the resulting
user id to :meth:`Session.sign_in`. Screens follow :attr:`Session.userChanged` to
re-scope their subscriptions.

:func:`get_creds` loads the service account key used by the Firestore backend.
"""

import logging
import threading
from typing import Optional

import google.auth.exceptions
from google.oauth2 import service_account
from PySide6 import QtCore

from ..status import status

DEFAULT_SCOPES = ['https://www.googleapis.com/auth/datastore', ]


class Session(QtCore.QObject):
    """Holds the signed-in user's id.

    Signals:
        userChanged (object): Emitted with the new user id, or None after sign-out.
    """
    userChanged = QtCore.Signal(object)

    def __init__(self, user_id: Optional[str] = None, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._lock = threading.Lock()
        self._user_id: Optional[str] = user_id or None

    @property
    def user_id(self) -> Optional[str]:
        with self._lock:
            return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def sign_in(self, user_id: str) -> None:
        """Switch to ``user_id``.

        Raises:
            ValueError: If ``user_id`` is empty.
        """
        if not user_id or not str(user_id).strip():
            raise ValueError('A user id is required to sign in.')
        self._set_user(str(user_id).strip())

    def sign_out(self) -> None:
        self._set_user(None)

    def _set_user(self, user_id: Optional[str]) -> None:
        with self._lock:
            if user_id == self._user_id:
                return
            self._user_id = user_id
        logging.info(f'Session user changed: {user_id!r}')
        self.userChanged.emit(user_id)


def get_creds() -> service_account.Credentials:
    """
    Load the service account credentials for the Firestore backend.

    Returns:
        service_account.Credentials: Scoped credentials.

    Raises:
        status.CredsNotFoundException: If the key file does not exist.
        status.CredsInvalidException: If the key file cannot be loaded.
    """
    from ..settings import lib

    path = lib.settings.creds_path
    if not path.exists():
        raise status.CredsNotFoundException(f'Expected a service account key at "{path}".')

    try:
        creds = service_account.Credentials.from_service_account_file(str(path), scopes=DEFAULT_SCOPES)
    except (ValueError, KeyError, google.auth.exceptions.GoogleAuthError) as ex:
        raise status.CredsInvalidException(str(ex)) from ex

    logging.debug(f'Loaded service account credentials for {creds.service_account_email}')
    return creds


session = Session()
