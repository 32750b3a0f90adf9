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
sql implementation of the store contracts

The mutating operations are single conditional `UPDATE` statements - the
condition carries the expected value, so the database row lock makes each
of them an atomic compare and swap. A statement that hits no row means
that a concurrent request was faster.

The stores work on the flask-sqlalchemy session and thus require an
application context.
"""

import copy
import logging

from sqlalchemy import delete, select, update

from oathd.lib.error import ConflictError, CredentialNotFound, ParameterError
from oathd.lib.store import SecretStore, SessionStore, utcnow
from oathd.model import db
from oathd.model.challenge import OcraChallenge
from oathd.model.credential import Credential

log = logging.getLogger(__name__)


class SqlSecretStore(SecretStore):
    # the counter column is a signed 64 bit integer
    max_counter = 2**63 - 1

    def add_credential(self, credential, secret: bytes, counter: int = 0):
        if not 0 <= counter <= self.max_counter:
            raise ParameterError(f"invalid counter value {counter!r}")

        db.session.merge(Credential(credential, secret, counter))
        db.session.commit()

    def _column(self, column, credential):
        row = db.session.execute(
            select(column).where(Credential.reference == credential)
        ).first()

        if row is None:
            raise CredentialNotFound(f"no such credential {credential!r}")

        return row[0]

    def _swap(self, credential, condition, values, what):
        stmt = (
            update(Credential)
            .where(Credential.reference == credential, condition)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        result = db.session.execute(stmt)
        if result.rowcount != 1:
            db.session.rollback()

            # distinguish the unknown credential from the lost race
            self._column(Credential.reference, credential)

            raise ConflictError(f"{what} of {credential!r} has changed")

        db.session.commit()

    def get_secret(self, credential):
        return self._column(Credential.secret, credential)

    def get_counter(self, credential):
        return self._column(Credential.counter, credential)

    def advance_counter(self, credential, new_value, expected):
        if new_value <= expected:
            raise ConflictError(
                f"counter of {credential!r} must not go back to {new_value!r}"
            )

        self._swap(
            credential,
            Credential.counter == expected,
            {"counter": new_value},
            "counter",
        )

    def get_last_step(self, credential):
        return self._column(Credential.last_step, credential)

    def record_step(self, credential, step, expected):
        if expected is None:
            condition = Credential.last_step.is_(None)
        else:
            if step <= expected:
                raise ConflictError(
                    f"step {step!r} of {credential!r} is not after {expected!r}"
                )
            condition = Credential.last_step == expected

        self._swap(credential, condition, {"last_step": step}, "last step")


class SqlSessionStore(SessionStore):
    def put(self, session_key, record, ttl):
        record = copy.copy(record).with_ttl(ttl)
        db.session.merge(OcraChallenge.from_record(session_key, record))
        db.session.commit()

    def get(self, session_key):
        challenge = db.session.execute(
            select(OcraChallenge)
            .where(OcraChallenge.session_key == session_key)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

        if challenge is None:
            return None

        record = challenge.to_record()

        if record.is_expired():
            self.invalidate(session_key)
            return None

        return record

    def invalidate(self, session_key):
        db.session.execute(
            delete(OcraChallenge)
            .where(OcraChallenge.session_key == session_key)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()

    def consume(self, session_key):
        result = db.session.execute(
            update(OcraChallenge)
            .where(
                OcraChallenge.session_key == session_key,
                OcraChallenge.consumed.is_(False),
                OcraChallenge.expires > utcnow(),
            )
            .values(consumed=True)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            db.session.rollback()
            return False

        db.session.commit()
        return True

    def register_failure(self, session_key):
        result = db.session.execute(
            update(OcraChallenge)
            .where(
                OcraChallenge.session_key == session_key,
                OcraChallenge.expires > utcnow(),
            )
            .values(attempts=OcraChallenge.attempts + 1)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            db.session.rollback()
            return 0

        # read back within the same transaction
        attempts = db.session.execute(
            select(OcraChallenge.attempts).where(
                OcraChallenge.session_key == session_key
            )
        ).scalar_one()

        db.session.commit()
        return attempts

    def reap(self):
        result = db.session.execute(
            delete(OcraChallenge)
            .where(OcraChallenge.expires <= utcnow())
            .execution_options(synchronize_session=False)
        )
        db.session.commit()

        if result.rowcount:
            log.debug("removed %d expired challenges", result.rowcount)

        return result.rowcount


# eof
