# Wizard steps, in the order a session walks them

# Entry step: agent signs in with name + phone
# Never gated
AUTH = "auth"

# Seller registration (shop details, GST number, shop photo)
# Gated: requires an authenticated user
SELLER = "seller"

# Product collection and batch submission
# Gated: requires an authenticated user
PRODUCTS = "products"

STEPS = (AUTH, SELLER, PRODUCTS)
ENTRY_STEP = AUTH
GATED_STEPS = frozenset({SELLER, PRODUCTS})
