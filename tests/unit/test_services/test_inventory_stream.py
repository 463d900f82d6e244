import pytest

from fridgy.core.state import ListenerScope, UiState
from fridgy.services.fridge_service import FridgeService
from fridgy.services.inventory_stream import LOAD_ITEMS_ERROR, FridgeItemsStream


@pytest.mark.unit
class TestFridgeItemsStream:
    """Live inventory flowing into a StateHolder."""

    def test_loading_then_success(self, db, household, milk):
        db.seed("fridges/fridge-1/items/a", {"upc": milk, "expirationDate": 1})
        stream = FridgeItemsStream(FridgeService(db), household.fridge_id)
        states = []
        stream.state.subscribe(states.append)

        stream.launch_in(ListenerScope())

        assert states[0] == UiState.Loading()
        assert states[-1].is_success
        items = states[-1].data
        assert items[0]["item"]["id"] == "a"
        assert items[0]["isExpired"] is True
        assert items[0]["product"]["name"] == "Whole Milk"

    def test_updates_follow_writes(self, db, household):
        stream = FridgeItemsStream(FridgeService(db), household.fridge_id)
        scope = ListenerScope()
        stream.launch_in(scope)
        assert stream.state.value == UiState.Success([])

        db.document("fridges/fridge-1/items/b").set({"upc": "222"})

        assert [entry["item"]["upc"] for entry in stream.state.value.data] == ["222"]

    def test_cancel_stops_updates(self, db, household):
        stream = FridgeItemsStream(FridgeService(db), household.fridge_id)
        scope = ListenerScope()
        stream.launch_in(scope)
        scope.cancel_all()

        db.document("fridges/fridge-1/items/b").set({"upc": "222"})

        assert stream.state.value == UiState.Success([])
        assert db.listeners == []

    def test_relaunch_replaces_listener(self, db, household):
        stream = FridgeItemsStream(FridgeService(db), household.fridge_id)
        scope = ListenerScope()
        stream.launch_in(scope)
        stream.launch_in(scope)
        assert len(db.listeners) == 1

    def test_error_state(self, db, household):
        stream = FridgeItemsStream(FridgeService(db), household.fridge_id)

        stream._on_error(RuntimeError(""))
        assert stream.state.value == UiState.Error(LOAD_ITEMS_ERROR)

        stream._on_error(RuntimeError("PERMISSION_DENIED: removed from household"))
        assert stream.state.value == UiState.Error("PERMISSION_DENIED: removed from household")
