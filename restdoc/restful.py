#  This file contains the flask-restful "Resource" objects exposed for a RestResource:
#  - CollectionAPI and InstanceAPI for the resource documents
#  - SubCollectionAPI and SubInstanceAPI for the documents linked to a parent document
#
#  The classes are subclassed for every resource by RestResource._route, the subclass sets
#  `resource`, `sub_resource` and `protection` and the http methods are wrapped by api_decorator
#
#  The yaml in the method docstrings (before the "---" delimiter) is added to the swagger
#
# pylint: disable=redefined-builtin,invalid-name,line-too-long,logging-format-interpolation
#
from http import HTTPStatus
from flask import jsonify, make_response, request
from flask_restful import Resource
import restdoc
from .config import get_config
from .errors import NotFoundError, ValidationError
from .linkage import append_link, link_position, linkage_ids, remove_link
from .query import QueryOptions, parse_query_parameters


def request_body():
    """
    :return: the JSON object sent with the request
    """
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def no_content():
    return make_response("", HTTPStatus.NO_CONTENT)


class RestResourceAPI(Resource):
    """
    Superclass of the exposed endpoints
    """

    # resource: the RestResource that is exposed
    resource = None
    # sub_resource: SubResource, only set for the nested endpoints
    sub_resource = None
    # protection: ProtectionRule per http method
    protection = {}
    # instance: whether the endpoint url identifies a single document
    instance = False

    @property
    def document(self):
        return self.resource.document


class CollectionAPI(RestResourceAPI):
    """
    /{name}
    """

    def get(self):
        """
        summary : Retrieve a list of {name}
        description : Retrieve the {name} documents, sorted and paginated with the query string arguments
        responses :
            200 :
                description : Request fulfilled, list follows
        ---
        The populate, sort, limit and skip query arguments are passed to the document's find
        """
        options = parse_query_parameters(request.args)
        restdoc.log.debug(f"Resource list: listing '{self.resource.name}' documents with options {options}")
        instances = self.document.find({}, options)
        return make_response(jsonify([instance.rest_filter(options) for instance in instances]), HTTPStatus.OK)

    def post(self):
        """
        summary : Create a {name} document
        responses :
            201 :
                description : Created
            400 :
                description : Bad Request
        """
        data = request_body()
        restdoc.log.debug(f"Resource post: creating '{self.resource.name}' document with {data}")
        instance = self.document.create(data).save()
        return make_response(jsonify(instance.rest_filter()), HTTPStatus.CREATED)


class InstanceAPI(RestResourceAPI):
    """
    /{name}/{id}
    """

    instance = True

    def get(self, id):
        """
        summary : Retrieve a {name} document
        responses :
            200 :
                description : Request fulfilled, document follows
            404 :
                description : Not Found
        ---
        Only the populate query argument is used
        """
        options = parse_query_parameters(request.args).populate_only()
        restdoc.log.debug(f"Resource get: getting '{self.resource.name}' document with id '{id}' with options {options}")
        instance = self.document.find_one({"id": id}, options)
        if instance is None:
            raise NotFoundError(self.resource.name, id)
        return make_response(jsonify(instance.rest_filter(options)), HTTPStatus.OK)

    def put(self, id):
        """
        summary : Update a {name} document
        responses :
            204 :
                description : Request fulfilled, nothing follows
            400 :
                description : Bad Request
            404 :
                description : Not Found
        """
        data = request_body()
        restdoc.log.debug(f"Resource put: updating '{self.resource.name}' document with id '{id}' with {data}")
        instance = self.document.find_one_and_update({"id": id}, data)
        if instance is None:
            raise NotFoundError(self.resource.name, id)
        return no_content()

    def delete(self, id):
        """
        summary : Delete a {name} document
        responses :
            204 :
                description : Request fulfilled, nothing follows
            404 :
                description : Not Found
        """
        restdoc.log.debug(f"Resource delete: deleting '{self.resource.name}' document with id '{id}'")
        deleted = self.document.delete_one({"id": id})
        if deleted == 0:
            raise NotFoundError(self.resource.name, id)
        return no_content()


class SubResourceAPI(RestResourceAPI):
    """
    Superclass of the nested endpoints: the parent document is always looked up first
    """

    def get_sub_resource(self, sub_name):
        """
        :param sub_name: sub resource url segment
        :return: SubResource
        """
        sub_resource = self.resource.sub_resources.get(sub_name)
        if sub_resource is None:
            # unreachable: the url rule only matches the declared names
            raise NotFoundError(self.resource.name, sub_name)
        return sub_resource

    def get_parent(self, id):
        """
        :param id: parent document id
        :return: parent document, loaded without populating references
        """
        parent = self.document.find_one({"id": id}, QueryOptions())
        if parent is None:
            raise NotFoundError(self.resource.name, id)
        return parent

    @staticmethod
    def linked_position(parent, sub_resource, sub_id):
        """
        :return: (linked ids, position of sub_id), raises a NotFoundError when sub_id isn't linked to the parent
        """
        ids = linkage_ids(getattr(parent, sub_resource.property, None))
        position = link_position(ids, sub_id)
        if position < 0:
            raise NotFoundError(sub_resource.name, sub_id)
        return ids, position


class SubCollectionAPI(SubResourceAPI):
    """
    /{name}/{id}/{sub_name}
    """

    def get(self, id, sub_name):
        """
        summary : Retrieve the {sub_name} of a {name} document
        responses :
            200 :
                description : Request fulfilled, list follows
            404 :
                description : Not Found
        """
        options = parse_query_parameters(request.args)
        sub_resource = self.get_sub_resource(sub_name)
        restdoc.log.debug(
            f"Sub resource list: listing sub resource '{sub_resource.name}' of resource '{self.resource.name}' document with id '{id}' with options {options}"
        )
        parent = self.get_parent(id)
        ids = linkage_ids(getattr(parent, sub_resource.property, None))
        instances = sub_resource.document.find({"id": {"$in": ids}}, options)
        return make_response(jsonify([instance.rest_filter(options) for instance in instances]), HTTPStatus.OK)

    def post(self, id, sub_name):
        """
        summary : Create a {sub_name} document linked to a {name} document
        responses :
            200 :
                description : Created, document follows
            400 :
                description : Bad Request
            404 :
                description : Not Found
        ---
        The child document is saved before the parent, a failing parent save doesn't remove the child
        """
        data = request_body()
        sub_resource = self.get_sub_resource(sub_name)
        restdoc.log.debug(f"Sub resource post: creating sub resource '{sub_resource.name}' of '{self.resource.name}' with id '{id}' document with {data}")
        parent = self.get_parent(id)
        instance = sub_resource.document.create(data).save()
        linked = append_link(getattr(parent, sub_resource.property, None), instance.id)
        setattr(parent, sub_resource.property, linked)
        parent.save()
        return make_response(jsonify(instance.rest_filter()), int(get_config("SUBRESOURCE_CREATED_STATUS")))


class SubInstanceAPI(SubResourceAPI):
    """
    /{name}/{id}/{sub_name}/{sub_id}
    """

    instance = True

    def get(self, id, sub_name, sub_id):
        """
        summary : Retrieve a {sub_name} document of a {name} document
        responses :
            200 :
                description : Request fulfilled, document follows
            404 :
                description : Not Found
        """
        options = parse_query_parameters(request.args).populate_only()
        sub_resource = self.get_sub_resource(sub_name)
        restdoc.log.debug(
            f"Sub resource get: getting sub resource '{sub_resource.name}' with id '{sub_id}' of resource '{self.resource.name}' document with id '{id}' with options {options}"
        )
        parent = self.get_parent(id)
        ids, position = self.linked_position(parent, sub_resource, sub_id)
        instance = sub_resource.document.find_one({"id": ids[position]}, options)
        if instance is None:
            # the parent links to a document that doesn't exist
            raise NotFoundError(sub_resource.name, sub_id)
        return make_response(jsonify(instance.rest_filter(options)), HTTPStatus.OK)

    def put(self, id, sub_name, sub_id):
        """
        summary : Update a {sub_name} document of a {name} document
        responses :
            204 :
                description : Request fulfilled, nothing follows
            400 :
                description : Bad Request
            404 :
                description : Not Found
        """
        data = request_body()
        sub_resource = self.get_sub_resource(sub_name)
        restdoc.log.debug(
            f"Sub resource put: updating sub resource '{sub_resource.name}' with id '{sub_id}' of resource '{self.resource.name}' document with id '{id}' with {data}"
        )
        parent = self.get_parent(id)
        ids, position = self.linked_position(parent, sub_resource, sub_id)
        instance = sub_resource.document.find_one_and_update({"id": ids[position]}, data)
        if instance is None:
            raise NotFoundError(sub_resource.name, sub_id)
        return no_content()

    def delete(self, id, sub_name, sub_id):
        """
        summary : Delete a {sub_name} document of a {name} document
        responses :
            204 :
                description : Request fulfilled, nothing follows
            404 :
                description : Not Found
        ---
        The id is removed from the parent's linkage field after the document has been deleted
        """
        sub_resource = self.get_sub_resource(sub_name)
        restdoc.log.debug(
            f"Sub resource delete: deleting sub resource '{sub_resource.name}' with id '{sub_id}' of resource '{self.resource.name}' document with id '{id}'"
        )
        parent = self.get_parent(id)
        ids, position = self.linked_position(parent, sub_resource, sub_id)
        deleted = sub_resource.document.delete_one({"id": ids[position]})
        if deleted == 0:
            raise NotFoundError(sub_resource.name, sub_id)
        setattr(parent, sub_resource.property, remove_link(ids, ids[position]))
        parent.save()
        return no_content()
