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
generation of the ocra challenges
"""

import logging

from oathd.lib.crypto.utils import create_session_key, geturandom
from oathd.lib.error import GenerationError, ParameterError
from oathd.lib.params import AlgorithmParameters
from oathd.lib.store import ChallengeRecord, SessionStore

log = logging.getLogger(__name__)


class ChallengeGenerator:
    """
    issues random ocra challenges and keeps their session state in the
    session store until they are used or expire
    """

    def __init__(self, parameters: AlgorithmParameters, session_store: SessionStore):
        self.parameters = parameters
        self.session_store = session_store

    def generate(self) -> tuple[str, str, bytes | None]:
        """
        create a new challenge

        :return: tuple of challenge, session key and the session data, which
                 is None if the ocra suite does not use session data
        :raises GenerationError: if the suite is not usable or if the random
                                 source failed
        """

        try:
            suite = self.parameters.suite
        except ParameterError as exx:
            raise GenerationError(
                f"can not create challenge: {exx.getDescription()}"
            ) from exx

        try:
            challenge = suite.create_challenge()
            session_key = create_session_key()
            session_data = geturandom(suite.S) if suite.S else None

        except (OSError, NotImplementedError) as exx:
            log.error("random source failed: %r", exx)
            raise GenerationError("random source not available") from exx

        record = ChallengeRecord(
            challenge=challenge,
            suite=suite.ocrasuite,
            session_data=session_data,
        )

        self.session_store.put(
            session_key, record, self.parameters.challenge_timeout
        )

        log.debug(
            "issued challenge for suite %r, valid for %ds",
            suite.ocrasuite,
            self.parameters.challenge_timeout,
        )

        return challenge, session_key, session_data


# eof
