"""
Firestore collection names, document field names and Cloud Storage paths.

These strings are the on-disk schema shared with the mobile clients; renaming
any of them breaks compatibility with existing documents.
"""


class Collections:
    ADMINS = "admins"
    CATEGORIES = "categories"
    FCM_TOKENS = "fcmTokens"
    FRIDGES = "fridges"
    HOUSEHOLDS = "households"
    INVITE_CODES = "inviteCodes"
    NOTIFICATIONS = "notifications"
    PRODUCTS = "products"
    USERS = "users"
    USER_PROFILES = "userProfiles"

    # Subcollections
    ITEMS = "items"
    SHOPPING_LIST = "shoppingList"
    SHOPPING_LIST_PRESENCE = "shoppingListPresence"


class Fields:
    # Common
    CREATED_AT = "createdAt"
    CREATED_BY = "createdBy"
    EMAIL = "email"
    LAST_SEEN = "lastSeen"
    LAST_UPDATED = "lastUpdated"
    LAST_UPDATED_AT = "lastUpdatedAt"
    LAST_UPDATED_BY = "lastUpdatedBy"
    NAME = "name"
    TYPE = "type"

    # Users
    UID = "uid"
    USER_ID = "userId"
    USERNAME = "username"

    # Admins
    GRANTED_AT = "grantedAt"
    GRANTED_BY = "grantedBy"

    # Categories
    ORDER = "order"

    # FCM tokens
    TOKEN = "token"
    UPDATED_AT = "updatedAt"

    # Products
    BRAND = "brand"
    CATEGORY = "category"
    IMAGE_URL = "imageUrl"
    SEARCH_TOKENS = "searchTokens"
    SIZE = "size"
    UNIT = "unit"
    UPC = "upc"

    # Households
    MEMBER_ROLES = "memberRoles"
    MEMBERS = "members"

    # Fridges
    HOUSEHOLD_ID = "householdId"
    LOCATION = "location"

    # Items
    ADDED_AT = "addedAt"
    ADDED_BY = "addedBy"
    EXPIRATION_DATE = "expirationDate"

    # Shopping list
    CHECKED = "checked"
    CUSTOM_NAME = "customName"
    OBTAINED = "obtained"
    OBTAINED_BY = "obtainedBy"
    OBTAINED_QUANTITY = "obtainedQuantity"
    QUANTITY = "quantity"
    STORE = "store"
    TARGET_FRIDGE_ID = "targetFridgeId"

    # Invite codes
    ACTIVE = "active"
    EXPIRED = "expired"
    EXPIRES_AT = "expiresAt"
    HOUSEHOLD_NAME = "householdName"
    USED_AT = "usedAt"
    USED_BY = "usedBy"
    VALID = "valid"

    # Notifications
    BODY = "body"
    IS_READ = "read"
    RELATED_FRIDGE_ID = "relatedFridgeId"
    RELATED_ITEM_ID = "relatedItemId"
    TITLE = "title"


class StoragePaths:
    PRODUCTS_DIR = "products"

    @classmethod
    def product_image(cls, upc: str) -> str:
        """Full storage path for a product image, e.g. ``products/0123.jpg``."""
        return f"{cls.PRODUCTS_DIR}/{upc}.jpg"


def field_path(*parts: str) -> str:
    """Join a nested map key, e.g. ``memberRoles.<uid>``, for dotted updates."""
    return ".".join(parts)
