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
HOTP validation (RFC 4226)
"""

import logging

from oathd.lib.error import CredentialNotFound
from oathd.lib.HMAC import HmacOtp
from oathd.lib.params import OATHType
from oathd.validators.base import (
    OTPValidator,
    Reason,
    ValidationResult,
    validator_registry,
)

log = logging.getLogger(__name__)


@validator_registry.class_entry(OATHType.HOTP)
class HotpValidator(OTPValidator):
    """
    validates event based otps against the stored counter

    The counter `C` is the next expected counter. The response is searched
    in the look-ahead window `C .. C + window`; a match resynchronises the
    counter to the one after the match. A response which matches one of
    the `window` counters before `C` is a replay of an already used otp.
    """

    def validate(
        self,
        response,
        challenge=None,
        credential=None,
        session_key=None,
        **options,
    ) -> ValidationResult:
        # the challenge is only an opaque label of the transport layer

        try:
            secret = self.secret_store.get_secret(credential)
            counter = self.secret_store.get_counter(credential)
        except CredentialNotFound:
            return ValidationResult.reject(Reason.UNKNOWN_CREDENTIAL)

        if not self.is_well_formed(response, self.parameters.digits):
            return ValidationResult.reject(Reason.RESPONSE_MISMATCH)

        hmac_otp = HmacOtp(
            digits=self.parameters.digits, hashfunc=self.parameters.hashfunc
        )

        last = self.last_counter(counter, self.parameters.window)
        for candidate in range(counter, last + 1):
            if self.matches(hmac_otp.generate(candidate, secret), response):
                return self.advance_counter(credential, counter, candidate)

        for candidate in range(max(0, counter - self.parameters.window), counter):
            if self.matches(hmac_otp.generate(candidate, secret), response):
                log.warning(
                    "hotp replay of counter %d for credential %r",
                    candidate,
                    credential,
                )
                return ValidationResult.reject(Reason.COUNTER_REPLAY, candidate)

        return ValidationResult.reject(Reason.RESPONSE_MISMATCH)


# eof #########################################################################
