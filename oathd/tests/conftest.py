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
Pytest fixtures for oathd tests
"""

# pylint: disable=redefined-outer-name

import os
import tempfile

import pytest

from oathd import app as app_py
from oathd.app import create_app
from oathd.lib.params import AlgorithmParameters
from oathd.lib.store.memory import MemorySecretStore, MemorySessionStore
from oathd.model import init_db_tables

from . import CONSUMER_KEY, KEY20


def pytest_configure(config):
    add_marks = [
        "app_config(dict): add contents of dict to app configuration",
    ]
    for mark in add_marks:
        config.addinivalue_line("markers", mark)


def pytest_addoption(parser):
    """Allow the developer to specify a database to test against directly"""

    parser.addoption(
        "--database-uri",
        dest="database_uri",
        action="store",
        default=os.environ.get("OATHD_PYTEST_DATABASE_URI", "sqlite:///{}"),
        help=(
            "sqlalchemy database URI to allow tests to run "
            "against a particular database (envvar: OATHD_PYTEST_DATABASE_URI)"
        ),
    )


@pytest.fixture
def sqlalchemy_uri(request):
    """The SQL alchemy URI to use to configure the database used for tests"""
    uri = request.config.getoption("database_uri")

    # Prevent override through the environment
    try:
        del os.environ["OATHD_DATABASE_URI"]
    except KeyError:
        pass
    return uri


@pytest.fixture
def base_app(tmp_path, request, sqlalchemy_uri):
    """
    App instance without context

    Creates and returns a bare app. If you wish
    an app with an initialised application context,
    use the `app` fixture instead
    """

    db_fd, db_path = None, None

    try:
        # if sqlalchemy_uri is the fallback, establish a temp file

        if sqlalchemy_uri == "sqlite:///{}":
            db_fd, db_path = tempfile.mkstemp()
            sqlalchemy_uri = sqlalchemy_uri.format(db_path)

        base_app_config = {
            "TESTING": True,
            "DATABASE_URI": sqlalchemy_uri,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "ROOT_DIR": tmp_path,
            "LOG_FILE_DIR": tmp_path / "logs",
            "LOG_LEVEL": "DEBUG",
            "LOG_CONSOLE_LEVEL": "DEBUG",
            "CONSUMER_KEYS": [CONSUMER_KEY],
        }

        config = request.node.get_closest_marker("app_config")
        if config is not None:
            base_app_config.update(config.args[0])

        os.environ["OATHD_CFG"] = ""

        # Fake running `oathd init database`
        os.environ["OATHD_CMD"] = "init-database"
        app = create_app("testing", base_app_config)

        if app.database_needed():
            with app.app_context():
                init_db_tables(app, drop_data=True)

        yield app

    finally:
        # in case of sqlite tempfile fallback, we have to wipe the dishes here

        if db_fd:
            os.close(db_fd)

        if db_path:
            os.unlink(db_path)


@pytest.fixture
def app(base_app, monkeypatch):
    """
    Provide an app and configured application context
    """
    # Disable request time logging
    monkeypatch.setattr(app_py, "log_request_timedelta", lambda logger: None)

    with base_app.app_context():
        yield base_app


@pytest.fixture
def auth_headers():
    """the request headers with the consumer key of the test app"""
    return {"X-OATH-Consumer-Key": CONSUMER_KEY}


@pytest.fixture
def secret_store():
    """a memory secret store with the RFC 4226 secret as 'alice'"""
    store = MemorySecretStore()
    store.add_credential("alice", KEY20)
    return store


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def hotp_params():
    return AlgorithmParameters.for_type("hotp")


@pytest.fixture
def totp_params():
    return AlgorithmParameters.for_type("totp", digits=8)


@pytest.fixture
def ocra_params():
    return AlgorithmParameters.for_type("ocra")
