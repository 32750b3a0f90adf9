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

from hashlib import sha1, sha256, sha512

import pytest

from oathd.lib.crypto.utils import (
    ALPHANUMERIC,
    compare,
    create_session_key,
    get_hashalgo_from_description,
    get_rand_str,
    geturandom,
)


@pytest.mark.parametrize(
    "one,two,expected",
    [
        ("123456", "123456", True),
        ("123456", "123457", False),
        ("123456", "1234567", False),
        (b"\x00\x01", b"\x00\x01", True),
        ("123456", b"123456", False),
        ("123456", None, False),
        (123456, "123456", False),
        ("", "", True),
    ],
)
def test_compare(one, two, expected):
    assert compare(one, two) is expected


@pytest.mark.parametrize(
    "description,hashfunc",
    [
        ("sha1", sha1),
        ("SHA1", sha1),
        ("sha256", sha256),
        ("Sha512", sha512),
        ("", sha1),
        (None, sha1),
    ],
)
def test_get_hashalgo(description, hashfunc):
    assert get_hashalgo_from_description(description) is hashfunc


def test_get_hashalgo_unsupported():
    with pytest.raises(ValueError):
        get_hashalgo_from_description("md5")


def test_random_values():
    assert len(geturandom(64)) == 64
    assert geturandom(20) != geturandom(20)

    rand_str = get_rand_str(32, ALPHANUMERIC)
    assert len(rand_str) == 32
    assert set(rand_str) <= set(ALPHANUMERIC)

    assert get_rand_str().isdigit()


def test_session_key():
    keys = {create_session_key() for _ in range(100)}

    # 32 bytes of entropy, url safe encoded
    assert len(keys) == 100
    for key in keys:
        assert len(key) >= 43
        assert all(c.isalnum() or c in "-_" for c in key)
