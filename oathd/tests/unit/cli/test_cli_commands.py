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
the oathd command line: init database, challenges reap, config show and
config explain
"""

from datetime import timedelta

import pytest
from freezegun import freeze_time

from oathd.cli import Echo
from oathd.cli import main as cli_main
from oathd.lib.error import CredentialNotFound
from oathd.lib.store import ChallengeRecord


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


class TestInitDatabase:
    def test_create(self, app, runner):
        app.secret_store.add_credential("alice", b"secret")

        result = runner.invoke(cli_main, ["-v", "init", "database"])

        assert result.exit_code == 0
        assert "Creating database" in result.output
        assert "Database created" in result.output

        # existing data is kept
        assert app.secret_store.get_secret("alice") == b"secret"

    def test_erase(self, app, runner):
        app.secret_store.add_credential("alice", b"secret")

        result = runner.invoke(
            cli_main, ["-v", "init", "database", "--erase-all-data", "--yes"]
        )

        assert result.exit_code == 0
        assert "Recreating database" in result.output

        with pytest.raises(CredentialNotFound):
            app.secret_store.get_secret("alice")

    def test_erase_not_confirmed(self, app, runner):
        app.secret_store.add_credential("alice", b"secret")

        result = runner.invoke(
            cli_main, ["init", "database", "--erase-all-data"], input="n\n"
        )

        assert result.exit_code != 0
        assert app.secret_store.get_secret("alice") == b"secret"

    @pytest.mark.app_config({"STORE_BACKEND": "memory"})
    def test_memory_backend(self, runner):
        result = runner.invoke(cli_main, ["-v", "init", "database"])

        assert result.exit_code == 0
        assert "needs no database" in result.output


class TestChallengesReap:
    def test_reap(self, app, runner):
        suite = "OCRA-1:HOTP-SHA1-6:QN08"

        with freeze_time("2024-05-01 12:00:00") as frozen:
            app.session_store.put("expired", ChallengeRecord("11111111", suite), 120)

            frozen.tick(timedelta(hours=1))
            app.session_store.put("live", ChallengeRecord("22222222", suite), 120)

            result = runner.invoke(cli_main, ["-v", "challenges", "reap"])

            assert result.exit_code == 0
            assert "1 expired challenges removed" in result.output
            assert app.session_store.get("live") is not None

    def test_quiet(self, runner):
        result = runner.invoke(cli_main, ["-q", "challenges", "reap"])

        assert result.exit_code == 0
        assert result.output == ""


class TestConfig:
    def test_show_item(self, runner):
        result = runner.invoke(cli_main, ["config", "show", "OATH_HOTP_WINDOW"])

        assert result.exit_code == 0
        assert result.output == "OATH_HOTP_WINDOW=10\n"

    def test_show_values(self, runner):
        result = runner.invoke(
            cli_main, ["config", "show", "--values", "OATH_TOTP_TIME_STEP"]
        )

        assert result.output == "30\n"

    def test_consumer_keys_are_masked(self, runner):
        from oathd.tests import CONSUMER_KEY

        result = runner.invoke(cli_main, ["config", "show"])

        assert result.exit_code == 0
        assert "CONSUMER_KEYS=['*****']" in result.output
        assert CONSUMER_KEY not in result.output

    def test_show_modified(self, runner):
        result = runner.invoke(
            cli_main, ["config", "show", "-m", "LOG_LEVEL", "OATH_HOTP_WINDOW"]
        )

        assert result.output == "LOG_LEVEL=DEBUG\n"

    def test_explain(self, runner):
        result = runner.invoke(cli_main, ["config", "explain", "OATH_OCRA_SUITE"])

        assert result.exit_code == 0
        assert "OATH_OCRA_SUITE:" in result.output
        assert "Type: str" in result.output
        assert "Default value: OCRA-1:HOTP-SHA1-6:QN08" in result.output

    def test_explain_unknown(self, runner):
        result = runner.invoke(cli_main, ["config", "explain", "NO_SUCH_ITEM"])

        assert "No information on NO_SUCH_ITEM" in result.output


class TestEcho:
    def test_verbosity(self, capsys):
        echo = Echo(verbosity=0)
        echo("failed")
        echo("details", v=1)

        captured = capsys.readouterr()
        assert captured.err == "failed\n"
        assert captured.out == ""

        Echo(verbosity=1)("details", v=1, err=False)
        assert capsys.readouterr().out == "details\n"

    def test_quiet(self, capsys):
        Echo(verbosity=-1)("failed")

        assert capsys.readouterr().err == ""
