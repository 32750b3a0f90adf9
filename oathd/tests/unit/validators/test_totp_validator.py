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

from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from oathd.lib.HMAC import HmacOtp
from oathd.lib.params import AlgorithmParameters
from oathd.lib.store.memory import MemorySecretStore
from oathd.validators import Reason
from oathd.validators.totp import TotpValidator, time2counter
from oathd.tests import KEY20, KEY32, KEY64


def at(unix_time):
    return datetime.fromtimestamp(unix_time, tz=timezone.utc)


def totp(step, digits=8, key=KEY20):
    return HmacOtp(digits=digits).generate(step, key)


@pytest.fixture
def validator(totp_params, secret_store):
    return TotpValidator(totp_params, secret_store)


@pytest.mark.parametrize(
    "unix_time,counter",
    [
        (59, 1),
        (1111111109, 0x23523EC),
        (1111111111, 0x23523ED),
        (1234567890, 0x273EF07),
        (2000000000, 0x3F940AA),
        (20000000000, 0x27BC86AA),
    ],
)
def test_time2counter(unix_time, counter):
    assert time2counter(unix_time, 30) == counter


def test_time2counter_t0():
    assert time2counter(89, t_step=30, t0=30) == 1
    assert time2counter(90, t_step=30, t0=30) == 2


# RFC 6238 appendix B

RFC6238_VECTORS = [
    (59, "sha1", KEY20, "94287082"),
    (1111111109, "sha1", KEY20, "07081804"),
    (1234567890, "sha1", KEY20, "89005924"),
    (59, "sha256", KEY32, "46119246"),
    (1111111111, "sha256", KEY32, "67062674"),
    (59, "sha512", KEY64, "90693936"),
    (2000000000, "sha512", KEY64, "38618901"),
]


@pytest.mark.parametrize("unix_time,hashlib,key,otp", RFC6238_VECTORS)
def test_rfc6238_vectors(unix_time, hashlib, key, otp):
    store = MemorySecretStore()
    store.add_credential("alice", key)

    params = AlgorithmParameters.for_type("totp", digits=8, hashlib=hashlib)
    validator = TotpValidator(params, store)

    with freeze_time(at(unix_time)):
        result = validator.validate(otp, credential="alice")

    assert result.accepted
    assert result.counter == time2counter(unix_time)
    assert store.get_last_step("alice") == time2counter(unix_time)


def test_step_replay(validator, secret_store):
    with freeze_time(at(1111111109)):
        assert validator.validate("07081804", credential="alice")

        result = validator.validate("07081804", credential="alice")

    assert not result
    assert result.reason == Reason.STEP_REPLAY
    assert result.reason.is_replay


def test_window(validator):
    step = time2counter(1111111109)

    with freeze_time(at(1111111109)):
        assert validator.validate(totp(step - 2), credential="alice").reason == (
            Reason.RESPONSE_MISMATCH
        )
        assert validator.validate(totp(step + 2), credential="alice").reason == (
            Reason.RESPONSE_MISMATCH
        )

        result = validator.validate(totp(step - 1), credential="alice")
        assert result.accepted
        assert result.counter == step - 1


def test_later_step_after_earlier_step(validator, secret_store):
    step = time2counter(1111111109)

    with freeze_time(at(1111111109)):
        assert validator.validate(totp(step - 1), credential="alice")
        assert validator.validate(totp(step), credential="alice")
        assert validator.validate(totp(step + 1), credential="alice")

    assert secret_store.get_last_step("alice") == step + 1


def test_earlier_step_after_later_step(validator, secret_store):
    step = time2counter(1111111109)

    with freeze_time(at(1111111109)):
        assert validator.validate(totp(step + 1), credential="alice")

        # not used before but behind the last accepted step
        result = validator.validate(totp(step), credential="alice")

    assert result.reason == Reason.STEP_REPLAY
    assert secret_store.get_last_step("alice") == step + 1


def test_window_zero(secret_store):
    params = AlgorithmParameters.for_type("totp", digits=8, window=0)
    validator = TotpValidator(params, secret_store)
    step = time2counter(1111111109)

    with freeze_time(at(1111111109)):
        assert not validator.validate(totp(step - 1), credential="alice")
        assert validator.validate(totp(step), credential="alice")


def test_negative_steps_are_skipped(validator):
    with freeze_time(at(10)):
        result = validator.validate(totp(0), credential="alice")

    assert result.accepted
    assert result.counter == 0


def test_time_moves_on(validator):
    with freeze_time(at(1111111109)) as frozen:
        otp = totp(time2counter(1111111109))

        frozen.tick(timedelta(seconds=60))
        assert not validator.validate(otp, credential="alice")


def test_time_step_and_t0(secret_store):
    params = AlgorithmParameters.for_type(
        "totp", digits=6, time_step=60, t0=1000
    )
    validator = TotpValidator(params, secret_store)

    with freeze_time(at(1000 + 60 * 5 + 30)):
        result = validator.validate(totp(5, digits=6), credential="alice")

    assert result.accepted
    assert result.counter == 5


@pytest.mark.parametrize("response", ["0708180", "070818044", "0708180a", None])
def test_malformed(validator, response):
    with freeze_time(at(1111111109)):
        result = validator.validate(response, credential="alice")

    assert result.reason == Reason.RESPONSE_MISMATCH


def test_unknown_credential(validator):
    with freeze_time(at(1111111109)):
        result = validator.validate("07081804", credential="bob")

    assert result.reason == Reason.UNKNOWN_CREDENTIAL


class RacingSecretStore(MemorySecretStore):
    """a concurrent request records a step right before us"""

    def __init__(self, concurrent_step):
        super().__init__()
        self.concurrent_step = concurrent_step
        self.raced = False

    def record_step(self, credential, step, expected):
        if not self.raced:
            self.raced = True
            super().record_step(credential, self.concurrent_step, expected)
        super().record_step(credential, step, expected)


def test_concurrent_use_of_the_same_step(totp_params):
    step = time2counter(1111111109)

    store = RacingSecretStore(concurrent_step=step)
    store.add_credential("alice", KEY20)
    validator = TotpValidator(totp_params, store)

    with freeze_time(at(1111111109)):
        result = validator.validate("07081804", credential="alice")

    assert result.reason == Reason.STEP_REPLAY


def test_concurrent_use_of_an_earlier_step(totp_params):
    step = time2counter(1111111109)

    store = RacingSecretStore(concurrent_step=step - 1)
    store.add_credential("alice", KEY20)
    validator = TotpValidator(totp_params, store)

    with freeze_time(at(1111111109)):
        result = validator.validate("07081804", credential="alice")

    assert result.accepted
    assert store.get_last_step("alice") == step
