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
the algorithm parameters of the oath types

The parameters are a value which is handed to the validators and the
challenge generator at construction time - the verification engine does
not look up any global configuration on its own.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from oathd.lib.crypto.utils import Hashlib_map, get_hashalgo_from_description
from oathd.lib.error import ParameterError, UnknownAlgorithm
from oathd.lib.ocra import OcraSuite

log = logging.getLogger(__name__)

DEFAULT_OCRA_SUITE = "OCRA-1:HOTP-SHA1-6:QN08"

MIN_DIGITS = 6
MAX_DIGITS = 10


class OATHType(str, Enum):
    OCRA = "ocra"
    HOTP = "hotp"
    TOTP = "totp"

    @classmethod
    def lookup(cls, oath_type):
        """
        get the oath type from its name

        :raises UnknownAlgorithm: if the name is not an oath type
        """
        if isinstance(oath_type, cls):
            return oath_type

        try:
            return cls(str(oath_type).lower())
        except ValueError as exx:
            raise UnknownAlgorithm(f"unknown oath type {oath_type!r}") from exx


# the per type defaults - the window is the counter look-ahead for hotp,
# the number of time steps in both directions for totp and the counter or
# time drift for ocra

DEFAULTS = {
    OATHType.HOTP: {"window": 10},
    OATHType.TOTP: {"window": 1},
    OATHType.OCRA: {"window": 0},
}

CONFIG_ITEMS = {
    OATHType.HOTP: {
        "digits": "OATH_HOTP_DIGITS",
        "hashlib": "OATH_HOTP_HASHLIB",
        "window": "OATH_HOTP_WINDOW",
    },
    OATHType.TOTP: {
        "digits": "OATH_TOTP_DIGITS",
        "hashlib": "OATH_TOTP_HASHLIB",
        "window": "OATH_TOTP_WINDOW",
        "time_step": "OATH_TOTP_TIME_STEP",
        "t0": "OATH_TOTP_T0",
    },
    OATHType.OCRA: {
        "ocra_suite": "OATH_OCRA_SUITE",
        "window": "OATH_OCRA_WINDOW",
        "challenge_timeout": "OATH_OCRA_CHALLENGE_TIMEOUT",
        "max_attempts": "OATH_OCRA_MAX_ATTEMPTS",
    },
}


@dataclass(frozen=True)
class AlgorithmParameters:
    """
    immutable configuration of one oath type

    for ocra the digits and the hashlib are taken from the ocra suite
    """

    oath_type: OATHType
    digits: int = 6
    hashlib: str = "sha1"
    window: int = 10
    time_step: int = 30
    t0: int = 0
    ocra_suite: str = DEFAULT_OCRA_SUITE
    challenge_timeout: int = 120
    max_attempts: int = 3

    def __post_init__(self):
        object.__setattr__(self, "oath_type", OATHType.lookup(self.oath_type))

        if self.oath_type == OATHType.OCRA:
            suite = self.suite
            object.__setattr__(self, "digits", suite.truncation)
            object.__setattr__(self, "hashlib", suite.hashlibStr)

        self._check()

    def _check(self):
        # the ocra truncation is already checked by the suite parser
        if self.oath_type != OATHType.OCRA and not (
            MIN_DIGITS <= self.digits <= MAX_DIGITS
        ):
            raise ParameterError(
                f"digits must be between {MIN_DIGITS} and {MAX_DIGITS}, "
                f"not {self.digits!r}"
            )

        if self.hashlib not in Hashlib_map:
            raise ParameterError(f"unsupported hashlib {self.hashlib!r}")

        if self.window < 0:
            raise ParameterError(f"invalid window {self.window!r}")

        if self.time_step <= 0:
            raise ParameterError(f"invalid time step {self.time_step!r}")

        if self.challenge_timeout <= 0:
            raise ParameterError(
                f"invalid challenge timeout {self.challenge_timeout!r}"
            )

        if self.max_attempts < 1:
            raise ParameterError(f"invalid max attempts {self.max_attempts!r}")

    @property
    def suite(self) -> OcraSuite:
        """the parsed ocra suite"""
        try:
            return OcraSuite(self.ocra_suite)
        except ValueError as exx:
            raise ParameterError(f"invalid ocra suite: {exx}") from exx

    @property
    def hashfunc(self):
        return get_hashalgo_from_description(self.hashlib)

    @classmethod
    def for_type(cls, oath_type, **overrides) -> "AlgorithmParameters":
        """
        create the parameters with the defaults of the oath type

        :param oath_type: oath type or its name
        :param overrides: parameter values which replace the defaults
        """
        oath_type = OATHType.lookup(oath_type)

        params = dict(DEFAULTS[oath_type])
        params.update(overrides)

        return cls(oath_type=oath_type, **params)

    @classmethod
    def from_config(cls, oath_type, config) -> "AlgorithmParameters":
        """
        create the parameters from the application configuration

        only items which are defined in the configuration are taken, all
        others fall back to the defaults of the oath type

        :param oath_type: oath type or its name
        :param config: mapping like the flask app config
        """
        oath_type = OATHType.lookup(oath_type)

        overrides = {}
        for name, key in CONFIG_ITEMS[oath_type].items():
            value = config.get(key)
            if value is not None:
                overrides[name] = value

        return cls.for_type(oath_type, **overrides)


# eof #########################################################################
