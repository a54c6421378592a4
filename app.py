import os

from chalice import Chalice

from chalicelib import auth, orders, menu_items, messages, ratings, images, users, triggers
from chalicelib.utils.app import request_exception_handler

app = Chalice(app_name='lategrub')

app.api.binary_types.insert(0, 'multipart/form-data')
app.debug = os.environ.get('LOG_LEVEL', 'DEBUG').upper() == 'DEBUG'


def get_gen_table_stream_arn():
    return os.environ["GEN_TABLE_STREAM_ARN"]


@app.on_dynamodb_record(stream_arn=get_gen_table_stream_arn())
def db_gen_table_stream_trigger(event):
    return triggers.db_gen_table_stream_trigger(event)


@app.route('/health-check', methods=['GET'], cors=True)
def health_check():
    return {'health': 'check'}


# AUTH
@app.route('/auth/signup', methods=['POST'], cors=True)
@request_exception_handler
def signup():
    return auth.signup(app.current_request)


@app.route('/auth/complete-signup', methods=['POST'], cors=True)
@request_exception_handler
def complete_signup():
    return auth.complete_signup(app.current_request)


@app.route('/auth/login', methods=['POST'], cors=True)
@request_exception_handler
def login():
    return auth.login_cognito(app.current_request)


@app.route('/auth/refresh', methods=['POST'], cors=True)
@request_exception_handler
def refresh_token():
    return auth.refresh_id_token_cognito(app.current_request)


@app.route('/auth/google', methods=['POST'], cors=True)
@request_exception_handler
def google_sign_in():
    return auth.google_sign_in(app.current_request)


# USERS
@app.route('/users', methods=['GET'], cors=True)
@request_exception_handler
def get_user():
    return users.User.init_request_user(app.current_request).endpoint_get_user()


@app.route('/users', methods=['PUT'], cors=True)
@request_exception_handler
def update_user():
    return users.User.init_request_update(app.current_request).endpoint_update_user()


@app.route('/users/photo', methods=['POST'], content_types=['multipart/form-data'], cors=True)
@request_exception_handler
def upload_profile_photo():
    return images.endpoint_upload_profile_photo(app.current_request)


# MENU
@app.route('/menu', methods=['GET'], cors=True)
@request_exception_handler
def get_menu():
    return menu_items.endpoint_get_menu()


# ORDERS
@app.route('/orders', methods=['POST'], cors=True)
@request_exception_handler
def place_order():
    """
    customer operation
    """
    return orders.Order.init_request_place_order(app.current_request).endpoint_place_order()


@app.route('/orders/active', methods=['GET'], cors=True)
@request_exception_handler
def get_active_orders():
    return orders.endpoint_get_active_orders(app.current_request)


@app.route('/orders/past', methods=['GET'], cors=True)
@request_exception_handler
def get_past_orders():
    return orders.endpoint_get_past_orders(app.current_request)


@app.route('/orders/{order_id}', methods=['GET'], cors=True)
@request_exception_handler
def get_order_by_id(order_id):
    """
    the customer and the assigned delivery partner can track the order
    """
    return orders.Order.init_request_get_order(app.current_request, order_id).endpoint_get_by_id()


# DELIVERIES
@app.route('/deliveries/available', methods=['GET'], cors=True)
@request_exception_handler
def get_available_orders():
    return orders.endpoint_get_available_orders(app.current_request)


@app.route('/deliveries/accepted', methods=['GET'], cors=True)
@request_exception_handler
def get_accepted_orders():
    return orders.endpoint_get_accepted_orders(app.current_request)


@app.route('/deliveries/history', methods=['GET'], cors=True)
@request_exception_handler
def get_delivery_history():
    return orders.endpoint_get_delivery_history(app.current_request)


@app.route('/deliveries/{order_id}/accept', methods=['POST'], cors=True)
@request_exception_handler
def accept_order(order_id):
    return orders.Order.init_request_delivery_action(app.current_request, order_id).endpoint_accept_order()


@app.route('/deliveries/{order_id}/status', methods=['POST'], cors=True)
@request_exception_handler
def advance_order_status(order_id):
    return orders.Order.init_request_delivery_action(app.current_request, order_id).endpoint_advance_status()


# CHATS
@app.route('/chats', methods=['GET'], cors=True)
@request_exception_handler
def get_chats():
    return messages.endpoint_get_chat_previews(app.current_request)


@app.route('/chats/{order_id}', methods=['GET'], cors=True)
@request_exception_handler
def get_conversation(order_id):
    return messages.endpoint_get_conversation(app.current_request, order_id)


@app.route('/chats/{order_id}', methods=['POST'], cors=True)
@request_exception_handler
def send_message(order_id):
    return messages.Message.init_request_send(app.current_request, order_id).endpoint_send_message()


@app.route('/messages/unread-count', methods=['GET'], cors=True)
@request_exception_handler
def get_unread_count():
    return messages.endpoint_get_unread_count(app.current_request)


# RATINGS
@app.route('/ratings', methods=['GET'], cors=True)
@request_exception_handler
def get_ratings():
    return ratings.endpoint_get_ratings()


@app.route('/ratings', methods=['POST'], cors=True)
@request_exception_handler
def submit_rating():
    return ratings.endpoint_submit_rating(app.current_request)
