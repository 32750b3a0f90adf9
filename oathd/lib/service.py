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
the OATHService facade: selects the validator of the oath type and issues
the ocra challenges
"""

import logging

from flask import current_app

from oathd.lib.challenge import ChallengeGenerator
from oathd.lib.error import UnknownAlgorithm, UnsupportedOperation
from oathd.lib.logs import log_timedelta, log_validation
from oathd.lib.params import AlgorithmParameters, OATHType
from oathd.lib.store import SecretStore, SessionStore
from oathd.validators import OTPValidator, ValidationResult, validator_registry

log = logging.getLogger(__name__)


def create_validator(
    oath_type,
    parameters: AlgorithmParameters,
    secret_store: SecretStore,
    session_store: SessionStore | None = None,
) -> OTPValidator:
    """
    create the validator of the oath type

    :raises UnknownAlgorithm: if there is no validator for the oath type
    """

    oath_type = OATHType.lookup(oath_type)

    validator_class = validator_registry.get(oath_type)
    if validator_class is None:
        raise UnknownAlgorithm(f"no validator for oath type {oath_type.value!r}")

    return validator_class(parameters, secret_store, session_store)


class OATHService:
    def __init__(
        self,
        oath_type,
        parameters: AlgorithmParameters,
        secret_store: SecretStore,
        session_store: SessionStore,
    ):
        self.oath_type = OATHType.lookup(oath_type)
        self.parameters = parameters
        self.secret_store = secret_store
        self.session_store = session_store

        self.validator = create_validator(
            self.oath_type, parameters, secret_store, session_store
        )

    def generate_challenge(self) -> dict:
        """
        issue a new ocra challenge

        :return: dict with the `challenge` and the `sessionKey` and, for
                 suites with session data input, the hex `sessionData`
        :raises UnsupportedOperation: for hotp and totp
        :raises GenerationError: if no challenge could be created
        """

        if self.oath_type != OATHType.OCRA:
            raise UnsupportedOperation(
                f"no challenges for oath type {self.oath_type.value!r}"
            )

        generator = ChallengeGenerator(self.parameters, self.session_store)
        challenge, session_key, session_data = generator.generate()

        result = {"challenge": challenge, "sessionKey": session_key}
        if session_data is not None:
            result["sessionData"] = session_data.hex()

        return result

    @log_timedelta(log)
    def validate_response(
        self,
        response,
        challenge=None,
        credential=None,
        session_key=None,
        **options,
    ) -> ValidationResult:
        """
        validate the response with the validator of the oath type

        challenge and session key are only used for ocra, for hotp and totp
        they are ignored.

        :param response: the otp or ocra response
        :param challenge: the answered ocra challenge
        :param credential: the reference of the shared secret
        :param session_key: the session key of the ocra challenge
        :param options: additional validator options like the ocra `pin`
        """

        result = self.validator.validate(
            response,
            challenge=challenge,
            credential=credential,
            session_key=session_key,
            **options,
        )

        log_validation(self.oath_type, credential, result)

        return result


def get_oath_service(oath_type) -> OATHService:
    """
    create the service of the oath type from the configuration and the
    stores of the current app
    """

    oath_type = OATHType.lookup(oath_type)
    parameters = AlgorithmParameters.from_config(oath_type, current_app.config)

    return OATHService(
        oath_type,
        parameters,
        current_app.secret_store,
        current_app.session_store,
    )


# eof #########################################################################
