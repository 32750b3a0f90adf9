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
the credentials: shared secret, hotp counter and last accepted totp step
"""

from sqlalchemy import BigInteger, Column, LargeBinary, String

from oathd.model import db


class Credential(db.Model):
    """
    a shared secret, referenced by the opaque credential reference of the
    consuming application
    """

    __tablename__ = "credentials"

    reference = Column("reference", String(255), primary_key=True)
    secret = Column("secret", LargeBinary, nullable=False)
    counter = Column("counter", BigInteger, default=0, nullable=False)
    last_step = Column("last_step", BigInteger, default=None, nullable=True)

    def __init__(self, reference: str, secret: bytes, counter: int = 0):
        super().__init__()

        self.reference = reference
        self.secret = secret
        self.counter = counter
        self.last_step = None

    def __repr__(self):
        # the secret must never show up in any log
        return f"Credential(reference={self.reference!r}, counter={self.counter!r})"


# eof
