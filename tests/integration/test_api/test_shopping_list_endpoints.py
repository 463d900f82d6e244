import pytest

API = "/api/v1/households"


@pytest.mark.integration
class TestShoppingListEndpoints:
    """Integration tests for /households/{id}/shopping-list."""

    def test_add_and_list(self, client, auth_headers, household, milk):
        headers = auth_headers(household.member)
        response = client.post(
            f"{API}/{household.id}/shopping-list",
            json={"upc": milk, "quantity": 2, "store": "Costco"},
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["upc"] == milk
        assert data["quantity"] == 2
        assert data["addedBy"] == household.member

        listed = client.get(f"{API}/{household.id}/shopping-list", headers=headers)
        assert [item["upc"] for item in listed.json()["data"]] == [milk]

    def test_outsider_is_rejected(self, client, auth_headers, household):
        response = client.get(f"{API}/{household.id}/shopping-list", headers=auth_headers(household.outsider))

        assert response.status_code == 403
        assert response.json()["error"]["category"] == "Authorization"

    def test_pickup_and_complete(self, client, auth_headers, household, db):
        """Test picked-up units land in the chosen fridge when the session completes."""
        db.seed("households/house-1/shoppingList/0001", {"upc": "0001", "quantity": 2})
        headers = auth_headers(household.member)

        pickup = client.put(
            f"{API}/{household.id}/shopping-list/0001/pickup",
            json={"obtained_quantity": 2, "total_quantity": 2, "target_fridge_id": household.second_fridge_id},
            headers=headers,
        )
        assert pickup.status_code == 200
        item = pickup.json()["data"]
        assert item["obtainedBy"] == {household.member: 2}
        assert item["checked"] is True

        completed = client.post(f"{API}/{household.id}/shopping-list/complete", headers=headers)
        assert completed.status_code == 200
        assert completed.json()["data"] == {"items_created": 2}
        assert len(db.paths_under("fridges/fridge-2/items")) == 2
        assert db.data("households/house-1/shoppingList/0001") is None

    def test_pickup_into_other_household_fridge(self, client, auth_headers, household, db):
        db.seed("households/house-1/shoppingList/0001", {"upc": "0001", "quantity": 1})

        response = client.put(
            f"{API}/{household.id}/shopping-list/0001/pickup",
            json={"obtained_quantity": 1, "total_quantity": 1, "target_fridge_id": household.other_fridge_id},
            headers=auth_headers(household.member),
        )

        assert response.status_code == 400
        assert response.json()["error"]["category"] == "Bad Request"

    def test_pickup_negative_quantity(self, client, auth_headers, household):
        response = client.put(
            f"{API}/{household.id}/shopping-list/0001/pickup",
            json={"obtained_quantity": -1, "total_quantity": 1},
            headers=auth_headers(household.member),
        )
        assert response.status_code == 422

    def test_presence(self, client, auth_headers, household):
        member = auth_headers(household.member)
        owner = auth_headers(household.owner)

        assert client.put(f"{API}/{household.id}/shopping-list/presence", headers=member).status_code == 200

        viewers = client.get(f"{API}/{household.id}/shopping-list/presence", headers=owner).json()["data"]
        assert [(v["userId"], v["username"]) for v in viewers] == [(household.member, "carol")]

        assert client.delete(f"{API}/{household.id}/shopping-list/presence", headers=member).status_code == 200
        assert client.get(f"{API}/{household.id}/shopping-list/presence", headers=owner).json()["data"] == []

    def test_remove_item(self, client, auth_headers, household, db):
        db.seed("households/house-1/shoppingList/0001", {"upc": "0001", "quantity": 1})
        headers = auth_headers(household.manager)

        response = client.delete(f"{API}/{household.id}/shopping-list/0001", headers=headers)
        assert response.status_code == 200
        assert db.data("households/house-1/shoppingList/0001") is None

        missing = client.delete(f"{API}/{household.id}/shopping-list/0001", headers=headers)
        assert missing.status_code == 404
