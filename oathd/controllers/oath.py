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
oath controller - issue ocra challenges and validate oath responses
"""

import logging

from oathd.controllers.base import BaseController, methods
from oathd.lib.params import OATHType
from oathd.lib.reply import sendResult, sendValidation
from oathd.lib.service import get_oath_service

log = logging.getLogger(__name__)


class OathController(BaseController):
    """
    The OathController is the http interface of the verification engine
    and accessible at::

        https://server/oath/...
    """

    @methods(["GET"])
    def challenge(self, oath_type):
        """
        issue a new challenge - only supported for ocra

        :param oath_type: the oath type, `ocra`

        :return:
            json document with the `challenge`, the `sessionKey` and the
            hex `sessionData` if the ocra suite requires session data

        """

        oath_type = OATHType.lookup(oath_type)
        service = get_oath_service(oath_type)

        return sendResult(service.generate_challenge())

    @methods(["GET"])
    def validate(self, oath_type):
        """
        validate the response of the user

        :param oath_type: the oath type, one of `ocra`, `hotp` or `totp`
        :param response: the otp or ocra response
        :param credential: the reference of the shared secret, the former
                           parameter name `secret` is accepted as well
        :param challenge: the answered challenge (ocra only)
        :param sessionKey: the session key of the challenge (ocra only)
        :param pin: the pin for ocra suites with pin input (optional)

        :return:
            204 if the response is accepted, 400 otherwise - the body is
            always empty

        """

        oath_type = OATHType.lookup(oath_type)

        response = self.get_param("response", optional=False)
        credential = self.get_param("credential", "secret", optional=False)

        options = {}
        if oath_type == OATHType.OCRA:
            pin = self.get_param("pin")
            if pin is not None:
                options["pin"] = pin

        service = get_oath_service(oath_type)

        result = service.validate_response(
            response,
            challenge=self.get_param("challenge"),
            credential=credential,
            session_key=self.get_param("sessionKey"),
            **options,
        )

        return sendValidation(result.accepted)


# eof #########################################################################
