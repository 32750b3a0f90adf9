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
no tampered response is ever accepted: single bit flips of the right
response are validated 10000 times for each oath type
"""

import random
from datetime import datetime, timezone

import pytest
from freezegun import freeze_time

from oathd.lib.params import AlgorithmParameters
from oathd.lib.store import ChallengeRecord
from oathd.validators import Reason
from oathd.validators.hotp import HotpValidator
from oathd.validators.ocra import OcraValidator
from oathd.validators.totp import TotpValidator

MUTATIONS = 10000


def flip_bit(response, rand):
    position = rand.randrange(len(response))
    flipped = chr(ord(response[position]) ^ (1 << rand.randrange(7)))
    return response[:position] + flipped + response[position + 1 :]


def fuzz(validator, response, **kwargs):
    rand = random.Random(4226)

    for _ in range(MUTATIONS):
        tampered = flip_bit(response, rand)
        assert tampered != response

        result = validator.validate(tampered, credential="alice", **kwargs)
        assert not result.accepted
        assert result.reason == Reason.RESPONSE_MISMATCH

    assert validator.validate(response, credential="alice", **kwargs)


def test_hotp(secret_store):
    params = AlgorithmParameters.for_type("hotp", window=0)
    validator = HotpValidator(params, secret_store)

    fuzz(validator, "755224")

    assert secret_store.get_counter("alice") == 1


def test_totp(secret_store):
    params = AlgorithmParameters.for_type("totp", digits=8, window=0)
    validator = TotpValidator(params, secret_store)

    with freeze_time(datetime.fromtimestamp(1111111109, tz=timezone.utc)):
        fuzz(validator, "07081804")


@pytest.mark.parametrize(
    "suite,response",
    [("OCRA-1:HOTP-SHA1-6:QN08", "237653")],
)
def test_ocra(secret_store, session_store, suite, response):
    params = AlgorithmParameters.for_type(
        "ocra", ocra_suite=suite, max_attempts=MUTATIONS + 1
    )
    validator = OcraValidator(params, secret_store, session_store)

    session_store.put("session", ChallengeRecord("00000000", suite), 3600)

    fuzz(validator, response, challenge="00000000", session_key="session")
