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
OCRA - the OATH challenge response algorithm (RFC 6287)

An ocra suite describes how the response is computed::

    OCRA-1:HOTP-SHA256-8:C-QN08-PSHA1
    |      |             |
    |      |             +- data input: [C] | QFxx | [PH | Snnn | TG]
    |      +- crypto function: HOTP-<hash>-<truncation>
    +- algorithm and version

The data input of the hmac is the suite string, a zero byte separator
and - in this order - the counter (8 bytes), the question padded to 128
bytes, the hash of the pin, the session data and the time step (8 bytes).
"""

import hmac
import logging
import re
import string
import struct

from oathd.lib.crypto.utils import (
    ALPHANUMERIC,
    HEXDIGITS,
    get_hashalgo_from_description,
    get_rand_str,
)
from oathd.lib.HMAC import HmacOtp

log = logging.getLogger(__name__)

OCRA_1 = "OCRA-1"

PERIODS = {"H": 3600, "M": 60, "S": 1}

CHALLENGE_ALPHABETS = {
    "N": string.digits,
    "A": ALPHANUMERIC,
    "H": HEXDIGITS,
}

QUESTION_LENGTH = 128


class OcraSuite:
    def __init__(self, ocrasuite: str):
        """
        parse the ocra suite description

        :param ocrasuite: the suite string like 'OCRA-1:HOTP-SHA1-6:QN08'
        :raises ValueError: if the suite is malformed or not supported
        """

        self.ocrasuite = ocrasuite

        self.hashlibStr = None
        self.hashfunc = None
        self.truncation = None

        # data input definitions
        self.C = None
        self.Q = None
        self.P = None
        self.S = None
        self.T = None

        self._parse(ocrasuite)

    def __repr__(self):
        return f"OcraSuite({self.ocrasuite!r})"

    def _parse(self, ocrasuite):
        if not isinstance(ocrasuite, str):
            raise ValueError(f"invalid ocra suite {ocrasuite!r}")

        parts = ocrasuite.split(":")
        if len(parts) != 3:
            raise ValueError(f"invalid ocra suite {ocrasuite!r}")

        algorithm, crypto_function, data_input = parts

        if algorithm != OCRA_1:
            raise ValueError(f"unsupported ocra version {algorithm!r}")

        self._parse_crypto_function(crypto_function)
        self._parse_data_input(data_input)

    def _parse_crypto_function(self, crypto_function):
        cparts = crypto_function.split("-")
        if len(cparts) != 3 or cparts[0] != "HOTP":
            raise ValueError(f"invalid crypto function {crypto_function!r}")

        self.hashlibStr = cparts[1].lower()
        self.hashfunc = get_hashalgo_from_description(self.hashlibStr)

        try:
            truncation = int(cparts[2])
        except ValueError as exx:
            raise ValueError(f"invalid truncation {cparts[2]!r}") from exx

        # 0 means no truncation, otherwise between 4 and 10 digits
        if truncation != 0 and not 4 <= truncation <= 10:
            raise ValueError(f"invalid truncation {truncation!r}")

        self.truncation = truncation

    def _parse_data_input(self, data_input):
        seen = set()

        for element in data_input.split("-"):
            if not element:
                raise ValueError(f"invalid data input {data_input!r}")

            letter, rest = element[0], element[1:]

            if letter in seen:
                raise ValueError(f"duplicate data input {element!r}")
            seen.add(letter)

            if letter == "C":
                if rest:
                    raise ValueError(f"invalid counter definition {element!r}")
                self.C = True

            elif letter == "Q":
                match = re.fullmatch(r"([NAH])(\d\d)", rest)
                if not match:
                    raise ValueError(f"invalid challenge definition {element!r}")

                length = int(match.group(2))
                if not 4 <= length <= 64:
                    raise ValueError(f"invalid challenge length {element!r}")

                self.Q = (match.group(1), length)

            elif letter == "P":
                self.P = get_hashalgo_from_description(rest or "sha1")

            elif letter == "S":
                if rest and not rest.isdigit():
                    raise ValueError(f"invalid session definition {element!r}")
                self.S = int(rest) if rest else 64

            elif letter == "T":
                complement = rest or "1M"
                if not re.fullmatch(r"(\d+[HMS])+", complement):
                    raise ValueError(f"invalid timestamp definition {element!r}")

                seconds = sum(
                    int(part[:-1]) * PERIODS[part[-1]]
                    for part in re.findall(r"\d+[HMS]", complement)
                )
                if seconds <= 0:
                    raise ValueError(f"invalid timestamp definition {element!r}")

                self.T = seconds

            else:
                raise ValueError(f"unknown data input {element!r}")

        if self.Q is None:
            raise ValueError("ocra suite without challenge definition")

    # ---------------------------------------------------------------------- --

    def time_step(self, now: float) -> int:
        """the time step counter of the suite for the unix time `now`"""
        if self.T is None:
            raise ValueError("ocra suite without timestamp definition")
        return int(now // self.T)

    def create_challenge(self) -> str:
        """
        create a random challenge in the format of the suite

        the challenge always has the maximum length the suite allows
        """
        fmt, length = self.Q
        return get_rand_str(length, CHALLENGE_ALPHABETS[fmt])

    def check_challenge(self, challenge) -> bool:
        """check if the challenge is valid for the format of the suite"""
        fmt, length = self.Q

        if not isinstance(challenge, str) or not challenge:
            return False

        if len(challenge) > length:
            return False

        alphabet = string.hexdigits if fmt == "H" else CHALLENGE_ALPHABETS[fmt]
        return all(c in alphabet for c in challenge)

    def _question(self, Q) -> bytes:
        if not self.check_challenge(Q):
            raise ValueError("challenge does not match the ocra suite")

        fmt, _length = self.Q

        if fmt == "N":
            # the decimal value as hex string, a trailing nibble is padded
            hex_q = format(int(Q), "X")
            question = bytes.fromhex(hex_q + "0" * (len(hex_q) % 2))

        elif fmt == "H":
            question = bytes.fromhex(Q + "0" * (len(Q) % 2))

        else:
            question = Q.encode("ascii")

        return question.ljust(QUESTION_LENGTH, b"\x00")

    def combineData(
        self,
        C=None,
        Q=None,
        P=None,
        P_digest=None,
        S=None,
        T=None,
        T_precomputed=None,
    ) -> bytes:
        """
        assemble the data input of the hmac

        :param C: the counter, required if the suite contains 'C'
        :param Q: the challenge (question)
        :param P: the pin, which is hashed with the suite pin hash
        :param P_digest: the already hashed pin as bytes or hex string
        :param S: the session data as bytes
        :param T: the unix time to derive the time step from
        :param T_precomputed: the time step value itself

        :return: the binary data input
        :raises ValueError: if a required input is missing or invalid
        """

        data = self.ocrasuite.encode("ascii") + b"\x00"

        if self.C:
            if C is None:
                raise ValueError("missing counter")

            C = int(C)
            if C < 0 or C >= 2**64:
                raise ValueError(f"invalid counter value {C!r}")

            data += struct.pack(">Q", C)

        data += self._question(Q)

        if self.P is not None:
            digest_size = self.P().digest_size

            if P_digest is not None:
                if isinstance(P_digest, str):
                    P_digest = bytes.fromhex(P_digest)
                if len(P_digest) != digest_size:
                    raise ValueError("invalid pin digest")
                data += P_digest

            elif P is not None:
                if isinstance(P, str):
                    P = P.encode("utf-8")
                data += self.P(P).digest()

            else:
                raise ValueError("missing pin")

        if self.S is not None:
            if isinstance(S, str):
                S = S.encode("utf-8")
            if S is None or len(S) != self.S:
                raise ValueError("invalid session data")
            data += S

        if self.T is not None:
            if T_precomputed is not None:
                timestep = int(T_precomputed)
            elif T is not None:
                timestep = self.time_step(T)
            else:
                raise ValueError("missing timestamp")

            data += struct.pack(">Q", timestep)

        return data

    def compute(self, data: bytes, key: bytes) -> str:
        """
        compute the ocra response from the data input and the key

        :param data: the data input as created by `combineData`
        :param key: the shared secret
        :return: the response as decimal string of `truncation` digits
        """

        digest = hmac.new(key, data, self.hashfunc).digest()

        if self.truncation == 0:
            return digest.hex()

        hmac_otp = HmacOtp(digits=self.truncation, hashfunc=self.hashfunc)
        return str(hmac_otp.truncate(digest)).rjust(self.truncation, "0")


# eof #########################################################################
