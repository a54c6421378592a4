import json

import pytest

from chalicelib.constants.constants import ROLE_CUSTOMER, ROLE_DELIVERY
from chalicelib.constants.status_codes import http200, http201, http400, http404, http409
from test.test_deliveries import create_test_users, accept_order, id_delivery, id_other_delivery
from test.test_orders import create_test_order, id_customer
from test.utils.request_utils import make_request

from test.utils.fixtures import chalice_gateway


def send_message(chalice_gateway, order_id, text, token):
    return make_request(chalice_gateway, endpoint=f'/chats/{order_id}', method='POST',
                        json_body={'text': text}, token=token)


def create_accepted_order(chalice_gateway) -> str:
    create_test_users()
    order_id = create_test_order(chalice_gateway)['id']
    accept_order(chalice_gateway, order_id)
    return order_id


@pytest.mark.local_db_test
def test_send_message(chalice_gateway):
    order_id = create_accepted_order(chalice_gateway)

    response = send_message(chalice_gateway, order_id, '  I am outside  ', id_delivery)

    assert response['statusCode'] == http201
    response_body = json.loads(response['body'])
    assert response_body['text'] == 'I am outside'
    assert response_body['recipient_id'] == id_customer
    assert response_body['sender'] == {'id': id_delivery, 'role': ROLE_DELIVERY}
    assert response_body['read'] is False


@pytest.mark.local_db_test
def test_send_empty_message(chalice_gateway):
    order_id = create_accepted_order(chalice_gateway)
    assert send_message(chalice_gateway, order_id, '   ', id_customer)['statusCode'] == http400


@pytest.mark.local_db_test
def test_send_message_before_order_is_accepted(chalice_gateway):
    create_test_users()
    order_id = create_test_order(chalice_gateway)['id']

    response = send_message(chalice_gateway, order_id, 'Anyone?', id_customer)
    assert response['statusCode'] == http409
    assert json.loads(response['body'])['exception'] == 'ConversationClosed'


@pytest.mark.local_db_test
def test_send_message_not_a_party(chalice_gateway):
    order_id = create_accepted_order(chalice_gateway)
    assert send_message(chalice_gateway, order_id, 'Hi', id_other_delivery)['statusCode'] == http404


@pytest.mark.local_db_test
def test_conversation_marks_messages_read(chalice_gateway):
    order_id = create_accepted_order(chalice_gateway)
    for text in ('Picked up your food', 'On my way'):
        send_message(chalice_gateway, order_id, text, id_delivery)
    send_message(chalice_gateway, order_id, 'Thanks!', id_customer)

    response = make_request(chalice_gateway, endpoint='/messages/unread-count', token=id_customer)
    assert json.loads(response['body']) == {'unread_count': 2, 'by_order': {order_id: 2}}

    response = make_request(chalice_gateway, endpoint=f'/chats/{order_id}', token=id_customer)
    assert response['statusCode'] == http200
    response_body = json.loads(response['body'])
    assert {message['text'] for message in response_body['messages']} == {
        'Picked up your food', 'On my way', 'Thanks!'}
    timestamps = [message['timestamp'] for message in response_body['messages']]
    assert timestamps == sorted(timestamps)
    assert response_body['marked_read'] == 2
    assert response_body['participant']['id'] == id_delivery
    assert response_body['participant']['name'] == 'Dana Delivery'

    response = make_request(chalice_gateway, endpoint='/messages/unread-count', token=id_customer)
    assert json.loads(response['body'])['unread_count'] == 0

    # the customer's own message stays unread for the partner
    response = make_request(chalice_gateway, endpoint='/messages/unread-count', token=id_delivery)
    assert json.loads(response['body'])['unread_count'] == 1


@pytest.mark.local_db_test
def test_chat_previews(chalice_gateway):
    order_id = create_accepted_order(chalice_gateway)
    create_test_order(chalice_gateway)
    send_message(chalice_gateway, order_id, 'Where should I wait?', id_delivery)

    response = make_request(chalice_gateway, endpoint='/chats', token=id_customer, role=ROLE_CUSTOMER)
    assert response['statusCode'] == http200
    chats = json.loads(response['body'])['chats']
    assert len(chats) == 1
    assert chats[0]['order_id'] == order_id
    assert chats[0]['participant']['name'] == 'Dana Delivery'
    assert chats[0]['participant']['role'] == ROLE_DELIVERY
    assert chats[0]['last_message']['text'] == 'Where should I wait?'
    assert chats[0]['unread_count'] == 1
    assert chats[0]['order_status'] == 'waiting'

    response = make_request(chalice_gateway, endpoint='/chats', token=id_delivery)
    chats = json.loads(response['body'])['chats']
    assert [chat['order_id'] for chat in chats] == [order_id]
    assert chats[0]['participant']['name'] == 'Casey Customer'
    assert chats[0]['participant']['photo'] == 'https://photos/casey.jpg'
    assert chats[0]['unread_count'] == 0
