import datetime
import restdoc
import sqlalchemy
from .errors import ValidationError


def parse_attr(column, attr_val):
    """
    Parse the supplied `attr_val` so it can be saved in the SQLAlchemy `column`

    :param column: SQLAlchemy column
    :param attr_val: json attribute value from the request body
    :return: processed value
    """
    if attr_val is None:
        return attr_val

    # skip type coercion on JSON columns, since they could be anything (e.g. linkage id lists)
    if isinstance(column.type, sqlalchemy.types.JSON):
        return attr_val

    try:
        python_type = column.type.python_type
    except NotImplementedError as exc:
        # custom column types handle their own conversion
        restdoc.log.debug(exc)
        return attr_val

    if isinstance(attr_val, python_type):
        return attr_val

    # ISO 8601 is what the json encoder sends, also accept the JS datepicker "%Y-%m-%d %H:%M:%S" format
    try:
        if python_type == datetime.datetime:
            return datetime.datetime.fromisoformat(str(attr_val))
        if python_type == datetime.date:
            return datetime.date.fromisoformat(str(attr_val))
        if python_type == datetime.time:
            return datetime.time.fromisoformat(str(attr_val))
        if python_type == bool and isinstance(attr_val, str):
            return attr_val.lower() in ("1", "true", "yes")
        return python_type(attr_val)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f'Invalid value "{attr_val}" for {column.key}: {exc}')
