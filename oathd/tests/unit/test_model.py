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

from sqlalchemy import inspect

from oathd.lib.store import ChallengeRecord
from oathd.model import db, init_db_tables
from oathd.model.challenge import OcraChallenge
from oathd.model.credential import Credential


def test_tables(app):
    tables = inspect(db.engine).get_table_names()

    assert "credentials" in tables
    assert "ocra_challenges" in tables


def test_init_db_tables_keeps_data(app):
    app.secret_store.add_credential("alice", b"secret")

    init_db_tables(app)
    assert app.secret_store.get_secret("alice") == b"secret"

    init_db_tables(app, drop_data=True)
    assert db.session.get(Credential, "alice") is None


def test_credential_repr_hides_secret():
    credential = Credential("alice", b"very secret", counter=3)

    assert "very secret" not in repr(credential)
    assert "alice" in repr(credential)


def test_challenge_record_mapping():
    record = ChallengeRecord("12345678", "OCRA-1:HOTP-SHA1-6:QN08").with_ttl(60)
    record.attempts = 2

    challenge = OcraChallenge.from_record("key", record)

    assert challenge.session_key == "key"
    assert challenge.to_record() == record
