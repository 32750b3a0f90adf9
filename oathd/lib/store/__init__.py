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
store contracts of the verification engine

The verification engine does not own any state. The shared secrets, the
hotp counters and the totp replay guard are owned by a `SecretStore`, the
issued ocra challenges are owned by a `SessionStore`. Both are handed to
the validators at construction time.

All mutating operations are atomic read-modify-write operations for the
single credential or session they address:

* `SecretStore.advance_counter` and `SecretStore.record_step` are compare
  and swap operations which raise a `ConflictError` if the stored value is
  no longer the expected one.
* `SessionStore.consume` marks a challenge as used and returns `True` for
  exactly one caller.
* `SessionStore.register_failure` increments the failed attempt counter
  and returns the new value.

Challenge times are naive utc datetimes. The lifetime of a challenge
starts when it is stored. Expiry is checked on read, `SessionStore.reap`
may be used to reclaim expired entries.
"""

import abc
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """the current utc time as naive datetime, as the database stores it"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class ChallengeRecord:
    challenge: str
    suite: str
    created: datetime | None = None
    expires: datetime | None = None
    session_data: bytes | None = None
    attempts: int = 0
    consumed: bool = False

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return self.expires is not None and self.expires <= now

    def with_ttl(self, ttl: int) -> "ChallengeRecord":
        # the lifetime starts when the record is stored
        self.created = utcnow()
        self.expires = self.created + timedelta(seconds=ttl)
        return self


class SecretStore(abc.ABC):
    """resolves credential references to secrets, counters and steps"""

    # the largest counter value the store can hold
    max_counter = 2**64

    @abc.abstractmethod
    def get_secret(self, credential: str) -> bytes:
        """
        :return: the shared secret of the credential
        :raises CredentialNotFound: for unknown credentials
        """

    @abc.abstractmethod
    def get_counter(self, credential: str) -> int:
        """
        :return: the next expected counter of the credential
        :raises CredentialNotFound: for unknown credentials
        """

    @abc.abstractmethod
    def advance_counter(self, credential: str, new_value: int, expected: int):
        """
        set the counter to `new_value` if it is still `expected`

        :raises ConflictError: if the counter is not `expected` anymore or
                               if `new_value` would not advance it
        """

    @abc.abstractmethod
    def get_last_step(self, credential: str) -> int | None:
        """
        :return: the last accepted totp time step or None
        """

    @abc.abstractmethod
    def record_step(self, credential: str, step: int, expected: int | None):
        """
        record `step` as last accepted time step if the last accepted step
        is still `expected`

        :raises ConflictError: if the last step is not `expected` anymore or
                               if `step` is not after it
        """


class SessionStore(abc.ABC):
    """holds the short lived state of the issued ocra challenges"""

    @abc.abstractmethod
    def put(self, session_key: str, record: ChallengeRecord, ttl: int):
        """store the challenge record under the session key for ttl seconds"""

    @abc.abstractmethod
    def get(self, session_key: str) -> ChallengeRecord | None:
        """
        :return: a copy of the challenge record or None if there is none or
                 if it is expired
        """

    @abc.abstractmethod
    def invalidate(self, session_key: str):
        """remove the challenge record"""

    @abc.abstractmethod
    def consume(self, session_key: str) -> bool:
        """
        mark the challenge as used

        :return: True if this call consumed the live challenge, False if it
                 was already consumed, expired or removed
        """

    @abc.abstractmethod
    def register_failure(self, session_key: str) -> int:
        """
        count a failed validation attempt

        :return: the number of failed attempts, 0 if there is no record
        """

    def reap(self) -> int:
        """
        remove expired challenge records

        :return: the number of removed records
        """
        return 0
