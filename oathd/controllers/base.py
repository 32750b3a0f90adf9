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
"""The Controller's Base class"""

import logging
from functools import wraps
from inspect import signature
from types import FunctionType

from flask import Blueprint, current_app, request

from oathd.lib.crypto.utils import compare
from oathd.lib.error import ConsumerKeyError, ParameterError

log = logging.getLogger(__name__)

CONSUMER_KEY_HEADER = "X-OATH-Consumer-Key"
CONSUMER_KEY_PARAM = "consumerKey"


class ControllerMetaClass(type):
    """This is used to determine the list of methods of a new
    controller that should be made available as API endpoints.
    Basically every method whose name does not start with an
    underscore has a Flask route to it added in the blueprint
    when a controller class is instantiated.
    """

    def __new__(meta, name, bases, dct):
        """When creating the new class, put a list of all its methods
        whose names do not start with `_` into the `_url_methods` class
        attribute. To support inheritance, we also add the content of
        the `_url_methods` attributes of any base classes.

        The `BaseController` itself contains only utility methods which
        are not API endpoints.
        """

        cls = super().__new__(meta, name, bases, dct)

        if name == "BaseController":
            cls._url_methods = set()
        else:
            cls._url_methods = {
                m for b in bases for m in getattr(b, "_url_methods", [])
            }
            for key, value in list(dct.items()):
                if key[0] != "_" and isinstance(value, FunctionType):
                    cls._url_methods.add(key)
        return cls


class BaseController(Blueprint, metaclass=ControllerMetaClass):
    """
    BaseController class - will be called with every request
    """

    default_url_prefix = ""

    def __init__(self, name, install_name="", **kwargs):
        super().__init__(name, __name__, **kwargs)

        # These methods will be called before each request
        self.before_request(self.consumer_key_check)

        # Add routes for all the routeable endpoints in this "controller",
        # as well as base classes.

        for method_name in self._url_methods:
            # Route the method to a URL of the same name,
            # except for index, which is routed to
            # /<controller-name>/
            if method_name == "index":
                url = "/"
            else:
                url = "/" + method_name

            method = getattr(self, method_name)

            # We can't set attributes on instancemethod objects but we
            # can set attributes on the underlying function objects.
            if not hasattr(method.__func__, "methods"):
                method.__func__.methods = ("GET", "POST")

            # add any parameters of the method to the end of the route,
            # in order.
            for arg in signature(method).parameters:
                url += "/<" + arg + ">"
            self.add_url_rule(url, method_name, view_func=method)

    def consumer_key_check(self):
        """
        verify that the request comes from a known consuming application

        the consumer key is taken from the `X-OATH-Consumer-Key` header or
        the `consumerKey` parameter and compared in constant time against
        every configured key.

        :raises ConsumerKeyError: if no or an unknown key was given
        """

        consumer_key = request.headers.get(
            CONSUMER_KEY_HEADER
        ) or self.request_params.get(CONSUMER_KEY_PARAM)

        if not consumer_key:
            log.warning("request without consumer key from %r", request.remote_addr)
            raise ConsumerKeyError("missing consumer key")

        known = False
        for key in current_app.config["CONSUMER_KEYS"]:
            # no early exit, all keys are compared
            known = compare(key, consumer_key) or known

        if not known:
            log.warning("invalid consumer key from %r", request.remote_addr)
            raise ConsumerKeyError()

    @property
    def request_params(self):
        return current_app.getRequestParams()

    def get_param(self, name, *aliases, optional=True):
        """
        get a request parameter, or the first of its aliases which is given

        :raises ParameterError: if a required parameter is missing
        """

        params = self.request_params
        for key in (name, *aliases):
            value = params.get(key)
            if value not in (None, ""):
                return value

        if not optional:
            raise ParameterError(f"Missing parameter: {name!r}")

        return None


def methods(mm=["GET"]):
    """
    Decorator to specify the allowable HTTP methods for a
    controller/blueprint method. It turns out that `Flask.add_url_rule`
    looks at a function object's `methods` property when figuring out
    what HTTP methods should be allowed on a view, so that's where we're
    putting the methods list.
    """

    def inner_func(func):
        func.methods = mm[:]

        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        return wrapper

    return inner_func
