from http import HTTPStatus

import pytest

from conftest import Owner, Pet


@pytest.fixture
def pets(app):
    """
    three pets, created in the app context
    """
    return [Pet.create({"name": name, "age": age, "chip_code": f"chip-{name}"}).save() for name, age in (("rex", 3), ("tom", 1), ("kit", 2))]


def test_empty_collection(client) -> None:
    response = client.get("/owners")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == []


def test_post_returns_the_filtered_projection(client) -> None:
    response = client.post("/owners", json={"name": "alice", "password": "secret", "pets": []})

    assert response.status_code == HTTPStatus.CREATED
    body = response.get_json()
    assert body["name"] == "alice"
    assert "password" not in body
    assert "refresh_token" not in body
    assert Owner.find_one({"id": body["id"]}).password == "secret"


def test_post_ignores_client_ids_and_unknown_fields(client) -> None:
    response = client.post("/owners", json={"id": "chosen", "name": "bob", "nickname": "bobby"})

    body = response.get_json()
    assert response.status_code == HTTPStatus.CREATED
    assert body["id"] != "chosen"
    assert "nickname" not in body


def test_get_instance(client, pets) -> None:
    response = client.get(f"/pets/{pets[0].id}")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {"id": pets[0].id, "name": "rex", "age": 3}


def test_get_missing_instance(client) -> None:
    response = client.get("/pets/nope")

    assert response.status_code == HTTPStatus.NOT_FOUND
    error = response.get_json()["errors"][0]
    assert error["code"] == "404"
    assert "pets" in error["title"]
    assert "nope" in error["title"]


def test_put_updates_the_document(client, pets) -> None:
    response = client.put(f"/pets/{pets[1].id}", json={"age": 7, "id": "other"})

    assert response.status_code == HTTPStatus.NO_CONTENT
    assert response.data == b""
    updated = Pet.find_one({"id": pets[1].id})
    assert updated.age == 7
    assert updated.name == "tom"


def test_put_missing_document(client) -> None:
    response = client.put("/pets/nope", json={"age": 7})

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert Pet.find() == []


def test_delete(client, pets) -> None:
    pet_id = pets[2].id

    response = client.delete(f"/pets/{pet_id}")

    assert response.status_code == HTTPStatus.NO_CONTENT
    assert Pet.find_one({"id": pet_id}) is None
    assert client.delete(f"/pets/{pet_id}").status_code == HTTPStatus.NOT_FOUND


@pytest.mark.parametrize("body", ["[1, 2]", '"pet"', "not json"])
def test_body_must_be_a_json_object(client, body: str) -> None:
    response = client.post("/pets", data=body, content_type="application/json")

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["errors"][0]["code"] == "400"
    assert Pet.find() == []


def test_invalid_field_value(client, pets) -> None:
    response = client.put(f"/pets/{pets[0].id}", json={"age": "old"})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "age" in response.get_json()["errors"][0]["detail"]
    assert Pet.find_one({"id": pets[0].id}).age == 3


def test_list_sort_limit_skip(client, pets) -> None:
    by_age = client.get("/pets?sort=age").get_json()
    by_name_desc = client.get("/pets?sort=-name").get_json()
    page = client.get("/pets?sort=name&limit=2&skip=1").get_json()

    assert [pet["name"] for pet in by_age] == ["tom", "kit", "rex"]
    assert [pet["name"] for pet in by_name_desc] == ["tom", "rex", "kit"]
    assert [pet["name"] for pet in page] == ["rex", "tom"]


def test_invalid_query_values_are_ignored(client, pets) -> None:
    response = client.get("/pets?limit=two&skip=-1&sort=age")

    assert response.status_code == HTTPStatus.OK
    assert [pet["name"] for pet in response.get_json()] == ["tom", "kit", "rex"]


def test_populate(client, pets) -> None:
    owner = Owner.create({"name": "alice", "pets": [pets[1].id, pets[0].id], "best_friend": pets[2].id}).save()

    plain = client.get(f"/owners/{owner.id}").get_json()
    populated = client.get(f"/owners/{owner.id}?populate=pets").get_json()
    everything = client.get("/owners?populate=true").get_json()[0]

    assert plain["pets"] == [pets[1].id, pets[0].id]
    assert [pet["name"] for pet in populated["pets"]] == ["tom", "rex"]
    assert "chip_code" not in populated["pets"][0]
    assert populated["best_friend"] == pets[2].id
    assert everything["best_friend"]["name"] == "kit"


def test_swagger(client) -> None:
    response = client.get("/swagger.json")

    assert response.status_code == HTTPStatus.OK
    paths = response.get_json()["paths"]
    assert set(paths) == {
        "/owners",
        "/owners/{id}",
        "/owners/{id}/pets",
        "/owners/{id}/pets/{sub_id}",
        "/owners/{id}/best_friend",
        "/owners/{id}/best_friend/{sub_id}",
        "/pets",
        "/pets/{id}",
    }
    assert paths["/owners/{id}/pets"]["get"]["summary"] == "Retrieve the pets of a owners document"
    assert paths["/owners/{id}/best_friend"]["get"]["summary"] == "Retrieve the best_friend of a owners document"
    assert [param["name"] for param in paths["/owners/{id}/pets/{sub_id}"]["delete"]["parameters"]] == ["id", "sub_id"]
    assert set(paths["/pets/{id}"]) == {"get", "put", "delete"}
    assert paths["/pets"]["get"]["summary"] == "Retrieve a list of pets"
    tags = {tag["name"]: tag for tag in response.get_json()["tags"]}
    assert tags["pets"]["description"] == "Pet of an owner"
