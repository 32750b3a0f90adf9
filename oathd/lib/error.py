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
"""definition of some specific error classes"""

import logging

log = logging.getLogger(__name__)


class OATHError(Exception):
    def __init__(self, description="OATHError!", id=10):
        self.id = id
        self.message = description
        Exception.__init__(self, description)

    def getId(self):
        return self.id

    def getDescription(self):
        return self.message

    def __str__(self):
        pstr = "ERR%d: %r"
        if isinstance(self.message, str):
            pstr = "ERR%d: %s"

        return pstr % (self.id, self.message)

    def __repr__(self):
        ret = f"{type(self).__name__}(description={self.message!r}, id={self.id})"
        return ret


class ParameterError(OATHError):
    def __init__(self, description="unspecified parameter error!", id=905):
        OATHError.__init__(self, description=description, id=id)


class UnknownAlgorithm(OATHError):
    def __init__(self, description="this oath type is not supported!", id=906):
        OATHError.__init__(self, description=description, id=id)


class UnsupportedOperation(OATHError):
    def __init__(
        self, description="operation not supported for this oath type!", id=907
    ):
        OATHError.__init__(self, description=description, id=id)


class GenerationError(OATHError):
    def __init__(self, description="challenge generation failed!", id=908):
        OATHError.__init__(self, description=description, id=id)


class ConflictError(OATHError):
    def __init__(self, description="concurrent update detected!", id=909):
        OATHError.__init__(self, description=description, id=id)


class CredentialNotFound(OATHError):
    def __init__(self, description="no such credential!", id=910):
        OATHError.__init__(self, description=description, id=id)


class ConsumerKeyError(OATHError):
    def __init__(self, description="invalid consumer key!", id=401):
        OATHError.__init__(self, description=description, id=id)


# eof #########################################################################
