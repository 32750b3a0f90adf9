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
HMAC-OTP (RFC 4226)
"""

import hmac
import logging
import struct
from hashlib import sha1

log = logging.getLogger(__name__)


class HmacOtp:
    def __init__(self, digits: int = 6, hashfunc=sha1):
        self.digits = digits
        self.hashfunc = hashfunc

    def hmac(self, counter: int, key: bytes) -> bytes:
        data_input = struct.pack(">Q", counter)
        return hmac.new(key, data_input, self.hashfunc).digest()

    def truncate(self, digest: bytes) -> int:
        offset = ord(digest[-1:]) & 0x0F

        binary = (digest[offset + 0] & 0x7F) << 24
        binary |= (digest[offset + 1] & 0xFF) << 16
        binary |= (digest[offset + 2] & 0xFF) << 8
        binary |= digest[offset + 3] & 0xFF

        return binary % (10**self.digits)

    def generate(self, counter: int, key: bytes) -> str:
        otp = str(self.truncate(self.hmac(counter=counter, key=key)))

        # fill in the leading zeros

        return otp.rjust(self.digits, "0")


# eof##########################################################################
