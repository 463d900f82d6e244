import pytest

from fridgy.models.invite_code import InviteCode, normalize_code
from fridgy.models.item import MS_PER_DAY, DisplayItem, Item, is_expired, is_expiring_soon
from fridgy.repositories.item_repository import ItemRepository, sort_display_items

NOW = 1_700_000_000_000


@pytest.mark.unit
class TestExpiry:
    def test_is_expired(self):
        assert is_expired(NOW - 1, NOW)
        assert not is_expired(NOW, NOW)
        assert not is_expired(None, NOW)

    def test_is_expiring_soon_within_three_days(self):
        assert is_expiring_soon(NOW + MS_PER_DAY, NOW)
        assert is_expiring_soon(NOW + 3 * MS_PER_DAY - 1, NOW)
        assert not is_expiring_soon(NOW + 3 * MS_PER_DAY, NOW)

    def test_expired_is_not_expiring_soon(self):
        assert not is_expiring_soon(NOW - 1, NOW)
        assert not is_expiring_soon(None, NOW)


@pytest.mark.unit
class TestItemSorting:
    """Expired first, then expiring soon, then dated, then undated."""

    def _items(self):
        return [
            Item(id="undated", upc="1"),
            Item(id="later", upc="1", expiration_date=NOW + 30 * MS_PER_DAY),
            Item(id="soon", upc="1", expiration_date=NOW + MS_PER_DAY),
            Item(id="expired-recent", upc="1", expiration_date=NOW - MS_PER_DAY),
            Item(id="sooner", upc="1", expiration_date=NOW + 1000),
            Item(id="expired-old", upc="1", expiration_date=NOW - 10 * MS_PER_DAY),
            Item(id="much-later", upc="1", expiration_date=NOW + 90 * MS_PER_DAY),
        ]

    def test_order(self):
        display = ItemRepository.build_display_items(self._items(), now=NOW)
        assert [entry.item.id for entry in display] == [
            "expired-old",
            "expired-recent",
            "sooner",
            "soon",
            "later",
            "much-later",
            "undated",
        ]

    def test_flags(self):
        display = {entry.item.id: entry for entry in ItemRepository.build_display_items(self._items(), now=NOW)}
        assert display["expired-old"].is_expired
        assert not display["expired-old"].is_expiring_soon
        assert display["soon"].is_expiring_soon
        assert not display["later"].is_expired
        assert not display["undated"].is_expiring_soon

    def test_products_are_attached_by_upc(self):
        from fridgy.models.product import Product

        items = [Item(id="a", upc="111"), Item(id="b", upc="222")]
        display = ItemRepository.build_display_items(items, {"111": Product(upc="111", name="Eggs")}, NOW)
        by_id = {entry.item.id: entry for entry in display}
        assert by_id["a"].product.name == "Eggs"
        assert by_id["b"].product is None

    def test_sort_display_items_is_stable_for_undated(self):
        entries = [DisplayItem.build(Item(id=str(i), upc="1"), now=NOW) for i in range(3)]
        assert [entry.item.id for entry in sort_display_items(entries)] == ["0", "1", "2"]

    def test_serialized_keys_are_camel_case(self):
        entry = DisplayItem.build(Item(id="a", upc="1", expiration_date=NOW - 1), now=NOW)
        dumped = entry.model_dump(mode="json", by_alias=True)
        assert dumped["isExpired"] is True
        assert dumped["item"]["expirationDate"] == NOW - 1


@pytest.mark.unit
class TestInviteCode:
    def test_normalize_code(self):
        assert normalize_code("  abc234 ") == "ABC234"
        assert normalize_code(None) == ""

    def test_valid_code(self):
        assert InviteCode(code="ABC234", household_id="h1").is_valid(NOW)

    def test_revoked_code(self):
        assert not InviteCode(code="ABC234", active=False).is_valid(NOW)

    def test_used_code(self):
        assert not InviteCode(code="ABC234", used_by="u2").is_valid(NOW)

    def test_expiry(self):
        invite = InviteCode(code="ABC234", expires_at=NOW)
        assert invite.is_valid(NOW)
        assert not invite.is_valid(NOW + 1)
        assert invite.is_expired(NOW + 1)

    def test_code_is_document_id(self):
        document = InviteCode(code="ABC234", household_id="h1").to_document()
        assert "code" not in document
        assert document["householdId"] == "h1"
        assert document["active"] is True
