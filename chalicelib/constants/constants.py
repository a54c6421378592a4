ROLE_CUSTOMER = 'customer'
ROLE_DELIVERY = 'delivery'
ROLES = (ROLE_CUSTOMER, ROLE_DELIVERY)

SESSION_ROLE_HEADER = 'x-session-role'
LANDING_PAGE = '/'

STATUS_ORDERED = 'ordered'
STATUS_WAITING = 'waiting'
STATUS_GOT_FOOD = 'got_food'
STATUS_WALKING = 'walking'
STATUS_DELIVERED = 'delivered'

ORDER_STATUSES = [STATUS_ORDERED, STATUS_WAITING, STATUS_GOT_FOOD, STATUS_WALKING, STATUS_DELIVERED]
ACTIVE_ORDER_STATUSES = ORDER_STATUSES[:-1]
ACCEPTED_ORDER_STATUSES = [STATUS_WAITING, STATUS_GOT_FOOD, STATUS_WALKING]

ORDER_STATUS_LABELS = {
    STATUS_ORDERED: 'Just Ordered',
    STATUS_WAITING: 'Waiting for Pickup',
    STATUS_GOT_FOOD: 'Food Picked Up',
    STATUS_WALKING: 'On the Way',
    STATUS_DELIVERED: 'Delivered'
}

PAYMENT_METHODS = ('cash', 'barter')

RATING_MIN = 1
RATING_MAX = 5

DEFAULT_ALLOWED_EMAIL_DOMAIN = 'owu.edu'
VERIFICATION_CODE_LENGTH = 6

PROFILE_PHOTOS_PREFIX = 'profile_photos'
DEFAULT_PHOTO_URL = 'https://via.placeholder.com/40'

VERIFICATION_EMAIL_SUBJECT = 'Your LateGrub verification link'

# user-facing strings per error code
ERROR_MESSAGES = {
    'permission-denied': 'You do not have permission to perform this action.',
    'not-found': 'The requested item was not found.',
    'invalid-argument': 'Some of the provided data is not valid.',
    'failed-precondition': 'This action is no longer possible. Please refresh and try again.',
    'unauthenticated': 'Please log in to continue.',
    'wrong-password': 'Incorrect password. Please try again.',
    'user-not-found': 'No account found with this email.',
    'already-exists': 'This email is already registered.',
    'unavailable': 'Service is currently unavailable. Please try again later.',
    'internal': 'Something went wrong. Please try again.'
}
