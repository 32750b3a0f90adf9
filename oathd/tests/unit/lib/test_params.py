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

import pytest

from oathd.lib.error import ParameterError, UnknownAlgorithm
from oathd.lib.params import AlgorithmParameters, OATHType


class TestOATHType:
    @pytest.mark.parametrize(
        "name,oath_type",
        [
            ("ocra", OATHType.OCRA),
            ("HOTP", OATHType.HOTP),
            ("Totp", OATHType.TOTP),
            (OATHType.TOTP, OATHType.TOTP),
        ],
    )
    def test_lookup(self, name, oath_type):
        assert OATHType.lookup(name) is oath_type

    @pytest.mark.parametrize("name", ["motp", "", None, "ocra2"])
    def test_lookup_unknown(self, name):
        with pytest.raises(UnknownAlgorithm):
            OATHType.lookup(name)


class TestAlgorithmParameters:
    def test_defaults(self):
        hotp = AlgorithmParameters.for_type("hotp")
        assert hotp.digits == 6
        assert hotp.hashlib == "sha1"
        assert hotp.window == 10

        totp = AlgorithmParameters.for_type(OATHType.TOTP)
        assert totp.window == 1
        assert totp.time_step == 30
        assert totp.t0 == 0

        ocra = AlgorithmParameters.for_type("ocra")
        assert ocra.window == 0
        assert ocra.challenge_timeout == 120
        assert ocra.max_attempts == 3

    def test_ocra_takes_digits_and_hash_from_suite(self):
        params = AlgorithmParameters.for_type(
            "ocra", ocra_suite="OCRA-1:HOTP-SHA256-8:QN08", digits=6
        )

        assert params.digits == 8
        assert params.hashlib == "sha256"
        assert params.suite.Q == ("N", 8)

    def test_ocra_without_truncation(self):
        params = AlgorithmParameters.for_type(
            "ocra", ocra_suite="OCRA-1:HOTP-SHA1-0:QN08"
        )
        assert params.digits == 0

    def test_immutable(self):
        params = AlgorithmParameters.for_type("hotp")

        with pytest.raises(AttributeError):
            params.window = 20

        assert params.window == 10

    @pytest.mark.parametrize(
        "oath_type,overrides",
        [
            ("hotp", {"digits": 5}),
            ("hotp", {"digits": 11}),
            ("totp", {"hashlib": "md5"}),
            ("hotp", {"window": -1}),
            ("totp", {"time_step": 0}),
            ("ocra", {"challenge_timeout": 0}),
            ("ocra", {"max_attempts": 0}),
            ("ocra", {"ocra_suite": "OCRA-1:HOTP-SHA1-6"}),
        ],
    )
    def test_invalid(self, oath_type, overrides):
        with pytest.raises(ParameterError):
            AlgorithmParameters.for_type(oath_type, **overrides)

    def test_from_config(self):
        config = {
            "OATH_TOTP_DIGITS": 8,
            "OATH_TOTP_HASHLIB": "sha256",
            "OATH_TOTP_TIME_STEP": 60,
            "OATH_HOTP_WINDOW": 3,
            "OATH_OCRA_SUITE": "OCRA-1:HOTP-SHA1-6:C-QN08",
            "OATH_OCRA_MAX_ATTEMPTS": 5,
        }

        totp = AlgorithmParameters.from_config("totp", config)
        assert totp.digits == 8
        assert totp.hashlib == "sha256"
        assert totp.time_step == 60
        assert totp.window == 1

        hotp = AlgorithmParameters.from_config("hotp", config)
        assert hotp.window == 3
        assert hotp.digits == 6

        ocra = AlgorithmParameters.from_config("ocra", config)
        assert ocra.suite.C is True
        assert ocra.max_attempts == 5
        assert ocra.challenge_timeout == 120

    def test_from_config_ignores_none(self):
        params = AlgorithmParameters.from_config("hotp", {"OATH_HOTP_WINDOW": None})
        assert params.window == 10
