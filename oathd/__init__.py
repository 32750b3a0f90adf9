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
oathd is a verification service for OATH one time passwords.

It issues and verifies challenges for the three OATH algorithms

    * OCRA - the challenge response algorithm (RFC 6287)
    * HOTP - the event / counter based algorithm (RFC 4226)
    * TOTP - the time based algorithm (RFC 6238)

and enforces the correctness and anti-replay rules of the respective RFCs:
look-ahead windows, counter resynchronisation, single use
challenges and constant time comparison of the responses.

The verification engine lives in `oathd.lib` and `oathd.validators` and
only depends on the abstract stores in `oathd.lib.store`. The Flask
application in `oathd.app` is a thin http layer on top of it.

"""

# IMPORTANT! This file is imported by setup.py, therefore do not (directly or
# indirectly) import any module that might not yet be installed when
# installing oathd.

__copyright__ = "Copyright (C) netgo software GmbH"
__product__ = "oathd"
__license__ = "Gnu AGPLv3"
__contact__ = "www.linotp.org"
__email__ = "info@linotp.de"
__version__ = "1.0.0"
__api__ = "1.0"
