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
TOTP validation (RFC 6238)
"""

import logging
import time

from oathd.lib.error import ConflictError, CredentialNotFound
from oathd.lib.HMAC import HmacOtp
from oathd.lib.params import OATHType
from oathd.validators.base import (
    OTPValidator,
    Reason,
    ValidationResult,
    validator_registry,
    window_deltas,
)

log = logging.getLogger(__name__)


def time2counter(t_time, t_step=30, t0=0):
    """
    the time step index of the unix time `t_time`

    :param t_time: the unix time in seconds
    :param t_step: the length of a time step in seconds
    :param t0: the unix time the counting starts at
    """
    return int((t_time - t0) // t_step)


@validator_registry.class_entry(OATHType.TOTP)
class TotpValidator(OTPValidator):
    """
    validates time based otps

    The response is searched in the steps `T - window .. T + window` around
    the current time step `T`, closest to `T` first. Each time step is
    accepted at most once: the last accepted step is kept in the secret
    store and every step up to it is a replay.
    """

    def validate(
        self,
        response,
        challenge=None,
        credential=None,
        session_key=None,
        **options,
    ) -> ValidationResult:
        try:
            secret = self.secret_store.get_secret(credential)
            last_step = self.secret_store.get_last_step(credential)
        except CredentialNotFound:
            return ValidationResult.reject(Reason.UNKNOWN_CREDENTIAL)

        if not self.is_well_formed(response, self.parameters.digits):
            return ValidationResult.reject(Reason.RESPONSE_MISMATCH)

        hmac_otp = HmacOtp(
            digits=self.parameters.digits, hashfunc=self.parameters.hashfunc
        )

        step = time2counter(
            time.time(), self.parameters.time_step, self.parameters.t0
        )

        replayed = None

        for delta in window_deltas(self.parameters.window):
            candidate = step + delta
            if candidate < 0:
                continue

            if not self.matches(hmac_otp.generate(candidate, secret), response):
                continue

            if last_step is not None and candidate <= last_step:
                if replayed is None:
                    replayed = candidate
                continue

            return self._record(credential, candidate, last_step)

        if replayed is not None:
            log.warning(
                "totp replay of step %d for credential %r", replayed, credential
            )
            return ValidationResult.reject(Reason.STEP_REPLAY, replayed)

        return ValidationResult.reject(Reason.RESPONSE_MISMATCH)

    def _record(self, credential, step, expected) -> ValidationResult:
        """
        remember the step as used, one retry if a concurrent request
        recorded another step in between
        """

        try:
            self.secret_store.record_step(credential, step, expected)
            return ValidationResult.ok(step)
        except ConflictError as exx:
            log.info("step update of %r failed: %r", credential, exx)

        current = self.secret_store.get_last_step(credential)
        if current is not None and current >= step:
            log.warning(
                "totp replay of step %d for credential %r", step, credential
            )
            return ValidationResult.reject(Reason.STEP_REPLAY, step)

        try:
            self.secret_store.record_step(credential, step, current)
        except ConflictError as exx:
            log.warning("step update of %r failed again: %r", credential, exx)
            return ValidationResult.reject(Reason.CONFLICT, step)

        return ValidationResult.ok(step)


# eof #########################################################################
