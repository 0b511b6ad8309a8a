"""Product domain constants.

Bounds enforced by ``ProductService`` on every value it writes.
"""

MAX_NAME_LENGTH = 255
MAX_PRICE = 999_999.99
MAX_QUANTITY = 999_999

# A single price change may not go below this fraction of the current price.
MIN_PRICE_RATIO = 0.5

SORTABLE_FIELDS: frozenset[str] = frozenset(
    {"id", "name", "price", "quantity", "status"}
)
SORT_ASCENDING = "ASC"
SORT_DESCENDING = "DESC"
