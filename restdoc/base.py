# base.py: implements the RestDocument SQLAlchemy db Mixin and the storage operations used by the routes
#
# pylint: disable=logging-format-interpolation,no-member,line-too-long,protected-access
#
"""
RestDocument class customizable attributes and methods, override these to customize the behavior of an exposed document.

exclude_attrs:
Type: List[str]
Description: Column names that are never serialized by `rest_filter`.


references:
Type: Dict[str, Union[str, type]]
Description: Maps a column holding one or a list of ids to the RestDocument class (or class name) of
the referenced documents. Referenced documents are embedded when the request asks to "populate" the column.


allow_client_generated_ids:
Type: bool
Description: Keep the "id" supplied in a POST body instead of generating one.


rest_filter:
Type: method
Description: Returns the serialization-safe projection of the instance. Override it to strip sensitive fields,
the override has to accept and pass on the optional QueryOptions argument.


find, find_one, create, find_one_and_update, delete_one:
Type: classmethod
Description: Storage operations called by the exposed routes.


save:
Type: method
Description: Adds the instance to the session and commits it.
"""
from __future__ import annotations
import uuid
import sqlalchemy
from sqlalchemy import inspect as sqla_inspect

import restdoc
from .errors import GenericError, ValidationError
from .attr_parse import parse_attr
from .linkage import linkage_ids
from .query import QueryOptions
from typing import Any, Dict, List, Mapping, Optional


class RestDocument:
    """This SQLAlchemy mixin implements the storage contract of the documents exposed by a RestResource
    e.g.

        class Book(RestDocument, db.Model):
            __tablename__ = "books"
            title = db.Column(db.String)

    The primary key is a string "id" column, a uuid4 is generated when no id is supplied
    """

    id = sqlalchemy.Column(sqlalchemy.String(64), primary_key=True)

    exclude_attrs = []  # list of attribute names that should not be serialized
    references = {}  # column name -> referenced RestDocument (class or class name)
    allow_client_generated_ids = False  # Indicates whether the client is allowed to create the id

    def __init__(self, *args, **kwargs):
        """
        :param kwargs: column values
        """
        if kwargs.get("id") is None:
            kwargs["id"] = str(uuid.uuid4())
        super().__init__(*args, **kwargs)

    @classmethod
    def _s_columns(cls) -> Dict[str, sqlalchemy.Column]:
        """
        :return: dict of mapped attribute names to columns
        """
        return {attr.key: attr.columns[0] for attr in sqla_inspect(cls).column_attrs}

    @classmethod
    def _s_query(cls):
        """
        :return: sqla query object
        """
        return restdoc.DB.session.query(cls)

    @classmethod
    def _s_filter_expressions(cls, filter: Optional[Mapping] = None) -> List:
        """
        Convert a filter into sqla expressions:
            { "name": "x" } => name == "x"
            { "id": { "$in" : ["a", "b"] } } => id IN ("a", "b")
        :param filter: dict of attribute names to values or operator dicts
        :return: list of sqla expressions
        """
        expressions = []
        columns = cls._s_columns()
        for attr_name, value in (filter or {}).items():
            if attr_name not in columns:
                raise ValidationError(f'Invalid filter, unknown attribute "{attr_name}"')
            attr = getattr(cls, attr_name)
            if not isinstance(value, Mapping):
                expressions.append(attr == value)
                continue
            for op_name, op_val in value.items():
                if op_name == "$in":
                    expressions.append(attr.in_(list(op_val)))
                elif op_name == "$nin":
                    expressions.append(attr.not_in(list(op_val)))
                elif op_name == "$ne":
                    expressions.append(attr != op_val)
                elif op_name == "$eq":
                    expressions.append(attr == op_val)
                else:
                    raise ValidationError(f'Invalid filter, unknown operator "{op_name}"')
        return expressions

    @classmethod
    def _s_sort(cls, query, sort: Optional[List[str]]):
        """
        :param query: sqla query
        :param sort: field names, a field name prefixed with "-" is sorted in descending order
        :return: sorted query
        """
        columns = cls._s_columns()
        for sort_attr in sort or []:
            reverse = sort_attr.startswith("-")
            if reverse:
                sort_attr = sort_attr[1:]
            if sort_attr not in columns:
                restdoc.log.debug(f"{cls.__name__} has no attribute {sort_attr}, not sorting")
                continue
            attr = getattr(cls, sort_attr)
            query = query.order_by(attr.desc() if reverse else attr)
        return query

    @classmethod
    def find(cls, filter: Optional[Mapping] = None, options: Optional[QueryOptions] = None) -> List[RestDocument]:
        """
        :param filter: see _s_filter_expressions
        :param options: QueryOptions
        :return: list of instances, may be empty
        """
        if options is None:
            options = QueryOptions()
        query = cls._s_query().filter(*cls._s_filter_expressions(filter))
        query = cls._s_sort(query, options.sort)
        if options.skip:
            query = query.offset(options.skip)
        if options.limit:
            # limit=0 means no limit
            query = query.limit(options.limit)
        return query.all()

    @classmethod
    def find_one(cls, filter: Optional[Mapping] = None, options: Optional[QueryOptions] = None) -> Optional[RestDocument]:
        """
        :param filter: see _s_filter_expressions
        :param options: QueryOptions, accepted for the document contract (populate is applied by rest_filter)
        :return: instance or None
        """
        return cls._s_query().filter(*cls._s_filter_expressions(filter)).first()

    @classmethod
    def create(cls, fields: Optional[Mapping[str, Any]] = None) -> RestDocument:
        """
        :param fields: column values (e.g. a POST body), unknown names are dropped
        :return: new, unsaved instance
        """
        columns = cls._s_columns()
        attributes = {}
        for attr_name, attr_val in (fields or {}).items():
            if attr_name not in columns:
                restdoc.log.debug(f"{cls.__name__}: ignoring unknown attribute {attr_name}")
                continue
            if attr_name == "id" and not cls.allow_client_generated_ids:
                restdoc.log.warning(f"Client generated IDs are not allowed ('allow_client_generated_ids' not set for {cls.__name__})")
                continue
            attributes[attr_name] = parse_attr(columns[attr_name], attr_val)
        # pylint: disable=not-callable
        return cls(**attributes)

    def save(self) -> RestDocument:
        """
        Persist the instance
        :return: self
        """
        restdoc.DB.session.add(self)
        self._s_commit()
        return self

    @classmethod
    def find_one_and_update(cls, filter: Optional[Mapping], fields: Optional[Mapping[str, Any]]) -> Optional[RestDocument]:
        """
        :param filter: see _s_filter_expressions
        :param fields: column values to update, "id" and unknown names are dropped
        :return: updated instance or None
        """
        instance = cls.find_one(filter)
        if instance is None:
            return None
        columns = cls._s_columns()
        for attr_name, attr_val in (fields or {}).items():
            if attr_name == "id" or attr_name not in columns:
                continue
            setattr(instance, attr_name, parse_attr(columns[attr_name], attr_val))
        instance._s_commit()
        return instance

    @classmethod
    def delete_one(cls, filter: Optional[Mapping]) -> int:
        """
        :param filter: see _s_filter_expressions
        :return: number of deleted instances (0 or 1)
        """
        instance = cls._s_query().filter(*cls._s_filter_expressions(filter)).first()
        if instance is None:
            return 0
        restdoc.DB.session.delete(instance)
        instance._s_commit()
        return 1

    def _s_commit(self) -> None:
        try:
            restdoc.DB.session.commit()
        except sqlalchemy.exc.SQLAlchemyError as exc:
            # Exception may arise when a db constraint has been violated (e.g. duplicate key)
            raise GenericError(str(exc)) from exc

    @staticmethod
    def _s_subclasses() -> Dict[str, type]:
        """
        :return: dict containing all RestDocument subclasses by class name
        """
        subclasses = {}
        todo = list(RestDocument.__subclasses__())
        while todo:
            subclass = todo.pop()
            subclasses.setdefault(subclass.__name__, subclass)
            todo += subclass.__subclasses__()
        return subclasses

    @classmethod
    def _s_reference_class(cls, attr_name: str) -> type:
        target = cls.references[attr_name]
        if isinstance(target, str):
            target = cls._s_subclasses().get(target)
        if target is None:
            raise GenericError(f"{cls.__name__}.{attr_name} references an unknown document {cls.references[attr_name]}")
        return target

    def _s_populated(self, attr_name: str, value: Any) -> Any:
        """
        :return: the projections of the documents referenced by `value`, in the order of the ids
        """
        target = self._s_reference_class(attr_name)
        ids = linkage_ids(value)
        documents = {doc.id: doc for doc in target.find({"id": {"$in": ids}})}
        # embedded documents are never populated themselves
        projections = [documents[ref_id].rest_filter() for ref_id in ids if ref_id in documents]
        if isinstance(value, list):
            return projections
        return projections[0] if projections else None

    def to_dict(self, options: Optional[QueryOptions] = None) -> Dict[str, Any]:
        """
        Create a dictionary with all the instance columns, except `exclude_attrs`
        Referenced documents are embedded when `options` populates their column

        :param options: QueryOptions of the request
        :return: dictionary
        """
        populate = options or QueryOptions()
        result = {}
        for attr_name in self._s_columns():
            if attr_name in self.exclude_attrs:
                continue
            value = getattr(self, attr_name)
            if attr_name in self.references and value is not None and populate.populates(attr_name):
                value = self._s_populated(attr_name, value)
            result[attr_name] = value
        return result

    def rest_filter(self, options: Optional[QueryOptions] = None) -> Dict[str, Any]:
        """
        Filters private property(ies) for the REST result
        The stored instance is never modified, calling this multiple times yields the same result

        :param options: QueryOptions of the request, only populate is used
        :return: serialization-safe dictionary
        """
        return self.to_dict(options)
