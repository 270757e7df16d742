from http import HTTPStatus

import pytest

from restdoc import GenericError
from conftest import Owner, Pet


@pytest.fixture
def owner(app) -> Owner:
    rex = Pet.create({"name": "rex", "age": 3}).save()
    tom = Pet.create({"name": "tom", "age": 1}).save()
    return Owner.create({"name": "alice", "pets": [rex.id, tom.id]}).save()


def test_post_links_the_new_document(client, owner: Owner) -> None:
    response = client.post(f"/owners/{owner.id}/pets", json={"name": "kit", "age": 2})

    assert response.status_code == HTTPStatus.OK
    kit = response.get_json()
    assert kit["name"] == "kit"
    pets = Owner.find_one({"id": owner.id}).pets
    assert len(pets) == 3
    assert pets[-1] == kit["id"]
    assert Pet.find_one({"id": kit["id"]}) is not None


def test_created_status_is_configurable(make_app) -> None:
    app = make_app(SUBRESOURCE_CREATED_STATUS=201)
    owner = Owner.create({"name": "alice"}).save()

    response = app.test_client().post(f"/owners/{owner.id}/pets", json={"name": "kit"})

    assert response.status_code == HTTPStatus.CREATED


def test_list(client, owner: Owner) -> None:
    response = client.get(f"/owners/{owner.id}/pets?sort=name")

    assert response.status_code == HTTPStatus.OK
    assert [pet["name"] for pet in response.get_json()] == ["rex", "tom"]


def test_list_without_links(client) -> None:
    owner = Owner.create({"name": "bob"}).save()

    response = client.get(f"/owners/{owner.id}/pets")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == []


def test_get_first_linked_document(client, owner: Owner) -> None:
    rex_id = owner.pets[0]

    response = client.get(f"/owners/{owner.id}/pets/{rex_id}")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["name"] == "rex"


def test_put_linked_document(client, owner: Owner) -> None:
    tom_id = owner.pets[1]

    response = client.put(f"/owners/{owner.id}/pets/{tom_id}", json={"age": 4})

    assert response.status_code == HTTPStatus.NO_CONTENT
    assert Pet.find_one({"id": tom_id}).age == 4


def test_delete_unlinks_the_document(client, owner: Owner) -> None:
    rex_id, tom_id = owner.pets

    response = client.delete(f"/owners/{owner.id}/pets/{rex_id}")

    assert response.status_code == HTTPStatus.NO_CONTENT
    assert Pet.find_one({"id": rex_id}) is None
    assert Owner.find_one({"id": owner.id}).pets == [tom_id]


def test_unlinked_document_is_not_found(client, owner: Owner) -> None:
    stray = Pet.create({"name": "stray"}).save()

    for method in ("get", "put", "delete"):
        response = getattr(client, method)(f"/owners/{owner.id}/pets/{stray.id}", json={"age": 1})
        assert response.status_code == HTTPStatus.NOT_FOUND
        assert "pets" in response.get_json()["errors"][0]["title"]

    assert Pet.find_one({"id": stray.id}).age is None


def test_missing_parent(client) -> None:
    get_response = client.get("/owners/nobody/pets")
    post_response = client.post("/owners/nobody/pets", json={"name": "kit"})

    assert get_response.status_code == HTTPStatus.NOT_FOUND
    assert "owners" in get_response.get_json()["errors"][0]["title"]
    assert post_response.status_code == HTTPStatus.NOT_FOUND
    assert Pet.find() == []


def test_dangling_link(client) -> None:
    owner = Owner.create({"name": "bob", "pets": ["gone"]}).save()

    response = client.get(f"/owners/{owner.id}/pets/gone")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert "pets" in response.get_json()["errors"][0]["title"]


def test_scalar_linkage(client) -> None:
    rex = Pet.create({"name": "rex"}).save()
    owner = Owner.create({"name": "bob", "best_friend": rex.id}).save()

    listed = client.get(f"/owners/{owner.id}/best_friend")
    single = client.get(f"/owners/{owner.id}/best_friend/{rex.id}")

    assert [pet["name"] for pet in listed.get_json()] == ["rex"]
    assert single.status_code == HTTPStatus.OK
    # reading doesn't rewrite the stored value
    assert Owner.find_one({"id": owner.id}).best_friend == rex.id

    created = client.post(f"/owners/{owner.id}/best_friend", json={"name": "kit"}).get_json()

    assert Owner.find_one({"id": owner.id}).best_friend == [rex.id, created["id"]]


def test_undeclared_sub_resource(client, owner: Owner) -> None:
    assert client.get(f"/owners/{owner.id}/cats").status_code == HTTPStatus.NOT_FOUND
    assert client.get(f"/pets/{owner.pets[0]}/pets").status_code == HTTPStatus.NOT_FOUND


def test_failing_parent_save_keeps_the_child(client, owner: Owner, monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_save(self):
        raise GenericError("parent save failed")

    monkeypatch.setattr(Owner, "save", failing_save)

    response = client.post(f"/owners/{owner.id}/pets", json={"name": "orphan"})

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.get_json()["errors"][0]["code"] == "500"
    assert len(Pet.find({"name": "orphan"})) == 1
    assert len(Owner.find_one({"id": owner.id}).pets) == 2
