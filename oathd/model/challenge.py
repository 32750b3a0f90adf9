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
the issued ocra challenges
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, LargeBinary, String

from oathd.lib.store import ChallengeRecord
from oathd.model import db


class OcraChallenge(db.Model):
    """
    the session state of an issued ocra challenge
    """

    __tablename__ = "ocra_challenges"

    session_key = Column("session_key", String(128), primary_key=True)
    challenge = Column("challenge", String(64), nullable=False)
    suite = Column("suite", String(128), nullable=False)
    session_data = Column("session_data", LargeBinary, default=None)
    created = Column("created", DateTime, nullable=False)
    expires = Column("expires", DateTime, nullable=False, index=True)
    attempts = Column("attempts", Integer, default=0, nullable=False)
    consumed = Column("consumed", Boolean, default=False, nullable=False)

    @classmethod
    def from_record(cls, session_key: str, record: ChallengeRecord):
        challenge = cls()
        challenge.session_key = session_key
        challenge.challenge = record.challenge
        challenge.suite = record.suite
        challenge.session_data = record.session_data
        challenge.created = record.created
        challenge.expires = record.expires
        challenge.attempts = record.attempts
        challenge.consumed = record.consumed
        return challenge

    def to_record(self) -> ChallengeRecord:
        return ChallengeRecord(
            challenge=self.challenge,
            suite=self.suite,
            created=self.created,
            expires=self.expires,
            session_data=self.session_data,
            attempts=self.attempts,
            consumed=self.consumed,
        )


# eof
