#
#    LinOTP - the open source solution for two factor authentication
#    Copyright (C) 2010-2019 KeyIdentity GmbH
#    Copyright (C) 2019-     netgo software GmbH
#
#    This file is part of LinOTP server.
#
#    This program is free software: you can redistribute it and/or
#    modify it under the terms of the GNU Affero General Public
#    License, version 3, as published by the Free Software Foundation.
#
#    This program is distributed in the hope that it will be useful,
#    but WITHOUT ANY WARRANTY; without even the implied warranty of
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#    GNU Affero General Public License for more details.
#
#    You should have received a copy of the
#               GNU Affero General Public License
#    along with this program.  If not, see <http://www.gnu.org/licenses/>.
#
#
#    E-mail: info@linotp.de
#    Contact: www.linotp.org
#    Support: www.linotp.de
#
"""
in memory implementation of the store contracts

The stores are protected by a single lock each, which makes every
operation atomic. They are usable for tests and single process
deployments - the content is lost on restart.
"""

import copy
import logging
import threading
from dataclasses import dataclass

from oathd.lib.error import ConflictError, CredentialNotFound
from oathd.lib.store import (
    ChallengeRecord,
    SecretStore,
    SessionStore,
    utcnow,
)

log = logging.getLogger(__name__)


@dataclass
class _Credential:
    secret: bytes
    counter: int = 0
    last_step: int | None = None


class MemorySecretStore(SecretStore):
    def __init__(self):
        self._credentials = {}
        self._lock = threading.Lock()

    def add_credential(self, credential, secret: bytes, counter: int = 0):
        with self._lock:
            self._credentials[credential] = _Credential(secret, counter)

    def _get(self, credential) -> _Credential:
        try:
            return self._credentials[credential]
        except KeyError as exx:
            raise CredentialNotFound(f"no such credential {credential!r}") from exx

    def get_secret(self, credential):
        with self._lock:
            return self._get(credential).secret

    def get_counter(self, credential):
        with self._lock:
            return self._get(credential).counter

    def advance_counter(self, credential, new_value, expected):
        with self._lock:
            entry = self._get(credential)

            if entry.counter != expected or new_value <= entry.counter:
                raise ConflictError(
                    f"counter of {credential!r} is not {expected!r} anymore"
                )

            entry.counter = new_value

    def get_last_step(self, credential):
        with self._lock:
            return self._get(credential).last_step

    def record_step(self, credential, step, expected):
        with self._lock:
            entry = self._get(credential)

            if entry.last_step != expected or (
                entry.last_step is not None and step <= entry.last_step
            ):
                raise ConflictError(
                    f"last step of {credential!r} is not {expected!r} anymore"
                )

            entry.last_step = step


class MemorySessionStore(SessionStore):
    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def _live(self, session_key) -> ChallengeRecord | None:
        record = self._records.get(session_key)
        if record is None:
            return None

        if record.is_expired():
            del self._records[session_key]
            return None

        return record

    def put(self, session_key, record, ttl):
        with self._lock:
            self._records[session_key] = copy.copy(record).with_ttl(ttl)

    def get(self, session_key):
        with self._lock:
            record = self._live(session_key)
            return copy.copy(record) if record is not None else None

    def invalidate(self, session_key):
        with self._lock:
            self._records.pop(session_key, None)

    def consume(self, session_key):
        with self._lock:
            record = self._live(session_key)
            if record is None or record.consumed:
                return False

            record.consumed = True
            return True

    def register_failure(self, session_key):
        with self._lock:
            record = self._live(session_key)
            if record is None:
                return 0

            record.attempts += 1
            return record.attempts

    def reap(self):
        with self._lock:
            now = utcnow()
            expired = [
                key
                for key, record in self._records.items()
                if record.is_expired(now)
            ]
            for key in expired:
                del self._records[key]

        if expired:
            log.debug("removed %d expired challenges", len(expired))

        return len(expired)
