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
OCRA validation (RFC 6287)
"""

import logging
import string
import time

from oathd.lib.error import CredentialNotFound, ParameterError
from oathd.lib.ocra import OcraSuite
from oathd.lib.params import OATHType
from oathd.validators.base import (
    OTPValidator,
    Reason,
    ValidationResult,
    validator_registry,
    window_deltas,
)

log = logging.getLogger(__name__)


@validator_registry.class_entry(OATHType.OCRA)
class OcraValidator(OTPValidator):
    """
    validates the response to an issued ocra challenge

    The challenge, the ocra suite and the session data are taken from the
    session store - the challenge given by the caller must be the issued
    one. A challenge can be answered successfully only once and only
    `max_attempts` wrong responses are tolerated before it is dropped.

    For counter suites the counter of the credential is searched in the
    look-ahead window and advanced on success, for time based suites the
    time step may drift by `window` steps.
    """

    def validate(
        self,
        response,
        challenge=None,
        credential=None,
        session_key=None,
        pin=None,
        pin_digest=None,
        **options,
    ) -> ValidationResult:
        """
        :param response: the response of the client
        :param challenge: the challenge the client answered
        :param credential: reference of the shared secret
        :param session_key: the session key returned with the challenge
        :param pin: the pin for suites with pin hash input
        :param pin_digest: the hashed pin, alternative to the pin
        """

        record = self.session_store.get(session_key) if session_key else None
        if record is None:
            return ValidationResult.reject(Reason.SESSION_NOT_FOUND)

        if not isinstance(challenge, str) or not self.matches(
            record.challenge, challenge
        ):
            log.warning("challenge substitution for session of %r", credential)
            return ValidationResult.reject(Reason.SESSION_NOT_FOUND)

        if record.consumed:
            log.warning("challenge replay for credential %r", credential)
            return ValidationResult.reject(Reason.CHALLENGE_ALREADY_USED)

        try:
            suite = OcraSuite(record.suite)
        except ValueError as exx:
            raise ParameterError(f"invalid stored ocra suite: {exx}") from exx

        if suite.P is not None and pin is None and pin_digest is None:
            raise ParameterError("the ocra suite requires a pin")

        try:
            secret = self.secret_store.get_secret(credential)
            counter = self.secret_store.get_counter(credential) if suite.C else None
        except CredentialNotFound:
            return ValidationResult.reject(Reason.UNKNOWN_CREDENTIAL)

        if self._is_well_formed(suite, response):
            for inputs in self._candidates(suite, counter):
                try:
                    data = suite.combineData(
                        Q=record.challenge,
                        P=pin,
                        P_digest=pin_digest,
                        S=record.session_data,
                        **inputs,
                    )
                except ValueError as exx:
                    raise ParameterError(f"invalid ocra input: {exx}") from exx

                if self.matches(suite.compute(data, secret), response):
                    return self._accept(
                        credential, session_key, counter, inputs.get("C")
                    )

        return self._failure(session_key)

    def _is_well_formed(self, suite, response) -> bool:
        if suite.truncation:
            return self.is_well_formed(response, suite.truncation)

        # no truncation - the response is the hex digest of the hmac
        return (
            isinstance(response, str)
            and len(response) == 2 * suite.hashfunc().digest_size
            and all(c in string.hexdigits for c in response)
        )

    def _candidates(self, suite, counter):
        """
        the counter and time step inputs to try, in order of preference
        """

        window = self.parameters.window

        counters = [None]
        if suite.C:
            last = self.last_counter(counter, window)
            counters = list(range(counter, last + 1))

        steps = [None]
        if suite.T:
            step = suite.time_step(time.time())
            steps = [
                step + delta for delta in window_deltas(window) if step + delta >= 0
            ]

        for C in counters:
            for T in steps:
                inputs = {}
                if C is not None:
                    inputs["C"] = C
                if T is not None:
                    inputs["T_precomputed"] = T
                yield inputs

    def _accept(self, credential, session_key, counter, matched):
        """
        consume the challenge - for counter suites the counter is moved
        behind the matched one first
        """

        if matched is not None:
            result = self.advance_counter(credential, counter, matched)
            if not result:
                return result

        if not self.session_store.consume(session_key):
            log.warning("challenge replay for credential %r", credential)
            return ValidationResult.reject(Reason.CHALLENGE_ALREADY_USED)

        return ValidationResult.ok(matched)

    def _failure(self, session_key) -> ValidationResult:
        """
        count the failed attempt and drop the challenge once the maximum
        number of attempts is reached
        """

        attempts = self.session_store.register_failure(session_key)
        if attempts == 0:
            # expired or removed in between
            return ValidationResult.reject(Reason.SESSION_NOT_FOUND)

        if attempts >= self.parameters.max_attempts:
            self.session_store.invalidate(session_key)
            log.warning(
                "challenge dropped after %d failed attempts", attempts
            )
            return ValidationResult.reject(Reason.ATTEMPTS_EXCEEDED)

        return ValidationResult.reject(Reason.RESPONSE_MISMATCH)


# eof #########################################################################
