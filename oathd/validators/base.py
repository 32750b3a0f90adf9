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
common base of the otp validators
"""

import abc
import logging
from dataclasses import dataclass
from enum import Enum

from oathd.lib.crypto.utils import compare
from oathd.lib.error import ConflictError
from oathd.lib.params import AlgorithmParameters
from oathd.lib.registry import ClassRegistry
from oathd.lib.store import SecretStore, SessionStore

log = logging.getLogger(__name__)

validator_registry = ClassRegistry()

# the largest counter value which fits into the 8 byte counter
MAX_COUNTER = 2**64 - 1


class Reason(str, Enum):
    OK = "ok"
    RESPONSE_MISMATCH = "response_mismatch"
    SESSION_NOT_FOUND = "session_not_found"
    CHALLENGE_ALREADY_USED = "challenge_already_used"
    ATTEMPTS_EXCEEDED = "attempts_exceeded"
    COUNTER_REPLAY = "counter_replay"
    STEP_REPLAY = "step_replay"
    UNKNOWN_CREDENTIAL = "unknown_credential"
    CONFLICT = "conflict"

    @property
    def is_replay(self) -> bool:
        return self in (
            Reason.COUNTER_REPLAY,
            Reason.STEP_REPLAY,
            Reason.CHALLENGE_ALREADY_USED,
        )


@dataclass(frozen=True)
class ValidationResult:
    """
    the outcome of a single validation

    :param accepted: True if the response was accepted
    :param reason: the cause of the outcome
    :param counter: the counter or time step the response matched, if any
    """

    accepted: bool
    reason: Reason
    counter: int | None = None

    def __bool__(self):
        return self.accepted

    @classmethod
    def ok(cls, counter=None) -> "ValidationResult":
        return cls(True, Reason.OK, counter)

    @classmethod
    def reject(cls, reason: Reason, counter=None) -> "ValidationResult":
        return cls(False, reason, counter)


def window_deltas(window: int):
    """
    the drift values of a symmetric window, closest to zero first and the
    earlier before the later one: 0, -1, +1, -2, +2, ...
    """
    yield 0
    for distance in range(1, window + 1):
        yield -distance
        yield distance


class OTPValidator(abc.ABC):
    def __init__(
        self,
        parameters: AlgorithmParameters,
        secret_store: SecretStore,
        session_store: SessionStore | None = None,
    ):
        self.parameters = parameters
        self.secret_store = secret_store
        self.session_store = session_store

    @abc.abstractmethod
    def validate(
        self,
        response,
        challenge=None,
        credential=None,
        session_key=None,
        **options,
    ) -> ValidationResult:
        """
        verify the response

        per attempt failures are returned as rejected `ValidationResult`,
        only a broken setup or misuse raises an exception
        """

    @staticmethod
    def is_well_formed(response, digits: int) -> bool:
        """check if the response is a decimal string of the expected length"""

        return (
            isinstance(response, str)
            and len(response) == digits
            and response.isascii()
            and response.isdigit()
        )

    @staticmethod
    def matches(expected: str, response: str) -> bool:
        return compare(expected, response)

    def last_counter(self, counter: int, window: int) -> int:
        """
        the end of the counter look-ahead

        the counter after a match has to fit into the 8 byte counter and
        into the secret store
        """
        return min(counter + window, MAX_COUNTER, self.secret_store.max_counter - 1)

    def advance_counter(self, credential, expected, matched) -> ValidationResult:
        """
        move the counter of the credential behind the matched one

        a concurrent request might have moved the counter in between - in
        that case the counter is read again: if it already passed the match
        the otp has been used, otherwise the update is tried once more.

        :param expected: the counter the match was searched from
        :param matched: the counter the response matched
        """

        try:
            self.secret_store.advance_counter(credential, matched + 1, expected)
            return ValidationResult.ok(matched)
        except ConflictError as exx:
            log.info("counter update of %r failed: %r", credential, exx)

        current = self.secret_store.get_counter(credential)
        if current > matched:
            log.warning(
                "replay of counter %d for credential %r", matched, credential
            )
            return ValidationResult.reject(Reason.COUNTER_REPLAY, matched)

        try:
            self.secret_store.advance_counter(credential, matched + 1, current)
        except ConflictError as exx:
            log.warning("counter update of %r failed again: %r", credential, exx)
            return ValidationResult.reject(Reason.CONFLICT, matched)

        return ValidationResult.ok(matched)


# eof #########################################################################
