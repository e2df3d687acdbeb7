#   __          __ _    _  ______  ______  _       __  __            _______  ______
#   \ \        / /| |  | ||  ____||  ____|| |     |  \/  |    /\    |__   __||  ____|
#    \ \  /\  / / | |__| || |__   | |__   | |     | \  / |   /  \      | |   | |__
#     \ \/  \/ /  |  __  ||  __|  |  __|  | |     | |\/| |  / /\ \     | |   |  __|
#      \  /\  /   | |  | || |____ | |____ | |____ | |  | | / ____ \    | |   | |____
#       \/  \/    |_|  |_||______||______||______||_|  |_|/_/    \_\   |_|   |______|
#

# Constants - Centralized configuration values and magic numbers.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# None

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# RATING_MIN / RATING_MAX: Accepted star range.
# EARTH_RADIUS_KM: Sphere radius for haversine distances.
# NEARBY_RADIUS_KM / NEARBY_LIMIT: Home screen shortlist bounds.
# CATEGORY_ALL: Category filter value that passes everything.
# SORT_*: Known sort keys for the explore view.
# USERNAME_MIN_LENGTH / PASSWORD_MIN_LENGTH / PASSWORD_MAX_BYTES: Registration limits.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# None


# Ratings
RATING_MIN = 1
RATING_MAX = 5

# Geography
EARTH_RADIUS_KM = 6371.0
LATITUDE_LIMIT = 90.0
LONGITUDE_LIMIT = 180.0

# Nearby shortlist (home screen)
NEARBY_RADIUS_KM = 5.0
NEARBY_LIMIT = 3

# Explore view
CATEGORY_ALL = "all"
SORT_DISTANCE = "distance"
SORT_RATING = "rating"
SORT_NAME = "name"

# Accounts
USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72  # bcrypt input limit
