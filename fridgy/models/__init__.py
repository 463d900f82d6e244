from fridgy.models.base import DocumentModel
from fridgy.models.role import (
    HouseholdRole,
    can_edit_roles,
    can_manage_fridges,
    can_manage_invite_codes,
    can_remove_members,
    can_delete_household,
    can_view_and_edit_items,
    can_modify_user,
)
from fridgy.models.user import User, UserProfile, CurrentUser
from fridgy.models.household import Household, DisplayHousehold
from fridgy.models.product import Product, SizeUnit, generate_search_tokens
from fridgy.models.fridge import Fridge, DisplayFridge
from fridgy.models.item import Item, DisplayItem
from fridgy.models.category import Category
from fridgy.models.invite_code import InviteCode
from fridgy.models.shopping_list import ShoppingListItem, ActiveViewer
from fridgy.models.notification import Notification, NotificationType, FcmToken

__all__ = [
    # Base
    "DocumentModel",
    # Roles
    "HouseholdRole",
    "can_edit_roles",
    "can_manage_fridges",
    "can_manage_invite_codes",
    "can_remove_members",
    "can_delete_household",
    "can_view_and_edit_items",
    "can_modify_user",
    # Users
    "User",
    "UserProfile",
    "CurrentUser",
    # Households
    "Household",
    "DisplayHousehold",
    # Products
    "Product",
    "SizeUnit",
    "generate_search_tokens",
    # Fridges & items
    "Fridge",
    "DisplayFridge",
    "Item",
    "DisplayItem",
    "Category",
    # Membership
    "InviteCode",
    # Shopping list
    "ShoppingListItem",
    "ActiveViewer",
    # Notifications
    "Notification",
    "NotificationType",
    "FcmToken",
]
