#
# Parsing of the url query string arguments into the options of a storage request
#
# Recognized arguments:
# - populate: "true" or a csv list of field names
# - sort: csv list of field names, a leading "-" requests a descending sort
# - limit, skip: non-negative integers
#
# Invalid values are logged and omitted, parsing never fails the request
#
import re
import restdoc
from typing import Any, List, Mapping, Optional, Union

POPULATE_RE = re.compile(r"^[a-zA-Z,]+$")
SORT_RE = re.compile(r"^[a-zA-Z,-]+$")
NUMBER_RE = re.compile(r"^[0-9]+$")


class QueryOptions:
    """
    Options of a storage request, derived from the request query string
    """

    def __init__(
        self,
        populate: Union[bool, List[str]] = False,
        sort: Optional[List[str]] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> None:
        self.populate = populate
        self.sort = sort
        self.limit = limit
        self.skip = skip

    def populate_only(self) -> "QueryOptions":
        """
        :return: a copy of the options without sort, limit and skip (used to fetch a single instance)
        """
        return QueryOptions(populate=self.populate)

    def populates(self, field_name: str) -> bool:
        """
        :param field_name: reference field name
        :return: whether the referenced documents of `field_name` should be embedded
        """
        if self.populate is True:
            return True
        return isinstance(self.populate, list) and field_name in self.populate

    def to_dict(self) -> dict:
        result = {"populate": self.populate}
        for name in ("sort", "limit", "skip"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, QueryOptions):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"QueryOptions({self.to_dict()})"


def parse_query_parameters(query: Optional[Mapping[str, str]]) -> QueryOptions:
    """
    Parse the query parameters of a resource request
    :param query: request query arguments (e.g. flask.request.args), may be None
    :return: QueryOptions
    """
    options = QueryOptions()
    if not query:
        return options

    populate = query.get("populate")
    if populate:
        if populate == "true":
            options.populate = True
        elif POPULATE_RE.fullmatch(populate):
            options.populate = populate.split(",")
        else:
            restdoc.log.warning(f"Resource: received request with invalid populate query parameter '{populate}'")

    sort = query.get("sort")
    if sort:
        if SORT_RE.fullmatch(sort):
            options.sort = sort.split(",")
        else:
            restdoc.log.warning(f"Resource: received request with invalid sort query parameter '{sort}'")

    for name in ("limit", "skip"):
        value = query.get(name)
        if not value:
            continue
        if NUMBER_RE.fullmatch(value):
            setattr(options, name, int(value))
        else:
            restdoc.log.warning(f"Resource: received request with invalid {name} query parameter '{value}'")

    return options
