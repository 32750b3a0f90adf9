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
"""create responses"""

import json
import logging

from flask import Response

from oathd import __api__, __version__
from oathd.lib.error import (
    ConsumerKeyError,
    OATHError,
    ParameterError,
    UnknownAlgorithm,
    UnsupportedOperation,
)

log = logging.getLogger(__name__)

INTERNAL_ERROR_ID = -311
INTERNAL_ERROR_MESSAGE = "internal server error"

# the http status of the errors - all other errors are reported as 500

ERROR_STATUS = (
    (ConsumerKeyError, 401),
    (UnknownAlgorithm, 404),
    (ParameterError, 400),
    (UnsupportedOperation, 400),
)


def get_error_status(exception) -> int:
    for error_class, status in ERROR_STATUS:
        if isinstance(exception, error_class):
            return status
    return 500


def sendError(exception: Exception | str, id: int = 1):
    """
    sendError - return a JSON error result document

    The http status is derived from the error class. Only errors of the
    oathd error hierarchy are reported with their description, all other
    exceptions are reported without any detail as they might carry
    internal information.

    :param exception: should be an oathd exception (see oathd.lib.error)
                      or a free text error
    :param id:        id value, for future versions

    :return:     json response
    """

    errId = INTERNAL_ERROR_ID
    errDesc = INTERNAL_ERROR_MESSAGE

    if isinstance(exception, OATHError):
        errId = exception.getId()
        errDesc = str(exception.getDescription())

    elif isinstance(exception, str):
        errDesc = exception

    res = {
        "jsonrpc": __api__,
        "result": {
            "status": False,
            "error": {
                "code": errId,
                "message": errDesc,
            },
        },
        "version": __version__,
        "id": id,
    }

    data = json.dumps(res, indent=3)
    return Response(
        response=data,
        status=get_error_status(exception),
        mimetype="application/json",
    )


def sendResult(obj, id=1, opt=None, status=True):
    """
    sendResult - return an json result document

    :param obj:      simple result object like dict, string or list
    :type  obj:      dict or list or string/unicode
    :param  id:      id value, for future versions
    :type   id:      int
    :param opt:      optional parameter, which allows to provide more detail
    :type  opt:      None or simple type like dict, list or string/unicode

    :return:     json rendered string result
    :rtype:      string

    """

    res = {
        "jsonrpc": __api__,
        "result": {
            "status": status,
            "value": obj,
        },
        "version": __version__,
        "id": id,
    }

    if opt is not None and len(opt) > 0:
        res["detail"] = opt

    data = json.dumps(res, indent=3)

    return Response(response=data, status=200, mimetype="application/json")


def sendValidation(accepted: bool):
    """
    return the outcome of a validation: 204 if the response was accepted,
    400 otherwise. The body stays empty so that no reason is revealed.
    """

    return Response(status=204 if accepted else 400)


# eof #########################################################################
