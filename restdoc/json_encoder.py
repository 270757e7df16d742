# restdoc to json encoding

import datetime
import decimal
import json
from flask.json.provider import DefaultJSONProvider
from uuid import UUID
import restdoc
from .base import RestDocument


class _RestJSONEncoder:
    """
    JSON encoding for documents (RestDocument subclasses) and common types
    """

    # pylint: disable=too-many-return-statements,arguments-differ,method-hidden
    def default(self, obj, **kwargs):
        """
        override the default json encoding
        :param obj: object to be encoded
        :return: encoded/serialized object
        """
        if isinstance(obj, RestDocument):
            return obj.rest_filter()
        if isinstance(obj, datetime.timedelta):
            return str(obj)
        if isinstance(obj, datetime.datetime):
            return obj.isoformat()
        if isinstance(obj, (datetime.date, datetime.time)):
            return obj.isoformat()
        if isinstance(obj, set):
            return list(obj)
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, decimal.Decimal):
            return float(obj)
        if isinstance(obj, bytes):
            if obj == b"":
                return ""
            restdoc.log.debug("RestJSONEncoder: serializing bytes obj")
            return obj.hex()

        restdoc.log.warning(f'JSON Encoding Error: Unknown object type "{type(obj)}" for {obj}')
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class RestJSONProvider(_RestJSONEncoder, DefaultJSONProvider):
    """
    Flask JSON encoding (jsonify)
    """


class RestJSONEncoder(_RestJSONEncoder, json.JSONEncoder):
    """
    Common JSON encoding, used by flask-restful's json representation
    """
