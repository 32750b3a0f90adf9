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

from oathd import __version__


def test_healthcheck(client):
    # no consumer key required
    res = client.get("/healthcheck/status")

    assert res.status_code == 200
    assert res.json["status"] == "alive"
    assert res.json["version"] == __version__
    assert res.json["uptime"] >= 0


def test_unknown_url(client, auth_headers):
    res = client.get("/oath/unknown/hotp", headers=auth_headers)
    assert res.status_code == 404


def test_internal_error(client, app, auth_headers, monkeypatch):
    def broken(credential):
        raise RuntimeError("database password is 'secret'")

    monkeypatch.setattr(app.secret_store, "get_secret", broken)

    res = client.get(
        "/oath/validate/hotp",
        query_string={"response": "755224", "credential": "alice"},
        headers=auth_headers,
    )

    assert res.status_code == 500
    assert res.json["result"]["error"]["code"] == -311
    assert "secret" not in res.get_data(as_text=True)
