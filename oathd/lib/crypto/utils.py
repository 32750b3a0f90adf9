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
Cryptographic utility functions
"""

import hmac
import logging
import secrets
import string
from hashlib import sha1, sha256, sha512

log = logging.getLogger(__name__)

Hashlib_map = {"sha1": sha1, "sha256": sha256, "sha512": sha512}

ALPHANUMERIC = string.digits + string.ascii_letters
HEXDIGITS = string.digits + "ABCDEF"


def compare(one, two) -> bool:
    """
    constant time comparison of two values

    the comparison takes the same time whatever position the first
    difference is at, so that the timing does not reveal how much of an
    otp value was right. Values of different type never match.

    :param one: first value (str or bytes)
    :param two: second value (str or bytes)
    :return: boolean
    """

    if isinstance(one, str) and isinstance(two, str):
        one = one.encode("utf-8")
        two = two.encode("utf-8")

    if not isinstance(one, bytes) or not isinstance(two, bytes):
        return False

    return hmac.compare_digest(one, two)


def get_hashalgo_from_description(description, fallback="sha1"):
    """
    get the hashing function from a string value

    :param description: the literal description of the hash
    :param fallback: the fallback hash allgorithm
    :return: hashing function pointer
    """

    if not description:
        description = fallback

    hash_func = Hashlib_map.get(description.lower())
    if hash_func is None:
        raise ValueError(f"unsupported hash function {description!r}")

    return hash_func


def geturandom(len=20):
    """
    get random bytes from the operating system csprng

    :param len: len of the returned bytes - defalt is 20 bytes
    :return: buffer of bytes
    """

    return secrets.token_bytes(len)


def get_rand_str(length=8, alphabet=string.digits):
    """
    create a random string of the given length from the alphabet

    :param length: number of characters
    :param alphabet: the characters to choose from
    :return: the random string
    """

    return "".join(secrets.choice(alphabet) for _ in range(length))


def create_session_key(len=32):
    """
    create an opaque, url safe session key with `len` bytes of entropy
    """

    return secrets.token_urlsafe(len)


# eof
