# dsrest to json encoding

import datetime
import decimal
from enum import Enum
from uuid import UUID
from flask.json.provider import DefaultJSONProvider
import dsrest
from .response import JSONAPI_MEDIA_TYPE


class _DSRESTJSONEncoder:
    """
    JSON encoding for the attribute values returned by the data sources
    """

    # pylint: disable=too-many-return-statements
    def default(self, obj, **kwargs):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if obj is None:
            return None
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            dsrest.log.debug("DSRESTJSONEncoder: serializing bytes obj")
            return obj.hex()

        dsrest.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
        return DefaultJSONProvider.default(obj)


class DSRESTJSONProvider(_DSRESTJSONEncoder, DefaultJSONProvider):
    """
    Flask JSON encoding
    """

    mimetype = JSONAPI_MEDIA_TYPE
