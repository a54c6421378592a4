import json
from decimal import Decimal

import pytest

from chalicelib.constants.constants import ROLE_CUSTOMER, ROLE_DELIVERY, ORDER_STATUSES
from chalicelib.constants.status_codes import http200, http201, http400, http403, http404
from chalicelib.orders import get_order_progress, get_next_status, calculate_total, normalize_order_item
from chalicelib.utils import exceptions
from test.utils.request_utils import make_request, create_test_user

from test.utils.fixtures import chalice_gateway

id_customer = 'c6b7cf39-4b6e-4a57-9a0b-0ff0ea0b2a11'
id_other_customer = '2f9b8a5e-0d3c-4c38-8c55-8a2f7e6c1b22'

order_to_create = {
    'items': [{'id': 'm1', 'quantity': 2}, {'id': 'd2', 'quantity': 1}, {'name': 'Extra ranch', 'quantity': 1}],
    'delivery_address': 'Smith Hall, room 204',
    'notes': 'Knock twice',
    'payment_method': 'cash',
    'payment_details': 'Exact change'
}


def create_test_order(chalice_gateway, customer_id=id_customer, body=None) -> dict:
    response = make_request(chalice_gateway, endpoint='/orders', method='POST',
                            json_body=body or order_to_create, token=customer_id)
    assert response['statusCode'] == http201
    return json.loads(response['body'])


def test_order_progress_is_status_position():
    for index, status in enumerate(ORDER_STATUSES):
        assert get_order_progress(status) == index
    assert get_order_progress('cancelled') == -1


def test_next_status():
    assert get_next_status('ordered') == 'waiting'
    assert get_next_status('walking') == 'delivered'
    assert get_next_status('delivered') is None


def test_calculate_total_skips_items_without_price():
    items = [
        {'name': 'burger', 'quantity': 2, 'price': Decimal('10.35')},
        {'name': 'pepsi', 'quantity': 3, 'price': Decimal('2.25')},
        {'name': 'napkins', 'quantity': 5}
    ]
    assert calculate_total(items) == Decimal('27.45')
    assert calculate_total([]) == Decimal('0.00')


def test_normalize_order_item():
    assert normalize_order_item({'id': 's1', 'quantity': 2}) == {
        'id': 's1', 'name': 'French Fries', 'quantity': 2, 'price': Decimal('3.10')}
    assert normalize_order_item({'name': ' Cookie ', 'price': Decimal('1.5')}) == {
        'name': 'Cookie', 'quantity': 1, 'price': Decimal('1.50')}

    with pytest.raises(exceptions.ValidationException):
        normalize_order_item({'id': 'unknown'})
    with pytest.raises(exceptions.ValidationException):
        normalize_order_item({'id': 'm1', 'quantity': 0})
    with pytest.raises(exceptions.ValidationException):
        normalize_order_item({'id': 'm1', 'quantity': Decimal('1.5')})
    with pytest.raises(exceptions.ValidationException):
        normalize_order_item({'quantity': 1})
    for price in ('NaN', 'Infinity', '-Infinity', 'cheap'):
        with pytest.raises(exceptions.ValidationException):
            normalize_order_item({'name': 'Cookie', 'quantity': 1, 'price': price})


@pytest.mark.local_db_test
def test_place_order(chalice_gateway):
    create_test_user(id_customer, name='Casey Customer')
    response_body = create_test_order(chalice_gateway)

    assert response_body['status'] == 'ordered'
    assert response_body['progress'] == 0
    assert response_body['status_label'] == 'Just Ordered'
    assert response_body['customer_id'] == id_customer
    assert response_body['customer_name'] == 'Casey Customer'
    assert response_body['delivery_person_id'] is None
    assert response_body['total'] == 22.95
    assert [item['name'] for item in response_body['items']] == [
        'SMASHED PUB BURGER', 'Sprite', 'Extra ranch']
    assert 'partkey' not in response_body and 'record_type' not in response_body


@pytest.mark.local_db_test
@pytest.mark.parametrize('body, error', [
    ({**order_to_create, 'items': []}, 'EmptyCart'),
    ({**order_to_create, 'delivery_address': '  '}, 'WrongDeliveryAddress'),
    ({**order_to_create, 'payment_method': 'card'}, 'WrongPaymentDetails'),
    ({**order_to_create, 'payment_details': ''}, 'WrongPaymentDetails'),
    ({**order_to_create, 'items': [{'id': 'm1', 'quantity': -1}]}, 'ValidationException'),
    ({**order_to_create, 'items': [{'name': 'Cookie', 'quantity': 1, 'price': 'NaN'}]}, 'ValidationException'),
])
def test_place_order_validation(chalice_gateway, body, error):
    create_test_user(id_customer)
    response = make_request(chalice_gateway, endpoint='/orders', method='POST', json_body=body, token=id_customer)

    assert response['statusCode'] == http400
    response_body = json.loads(response['body'])
    assert response_body['exception'] == error
    assert response_body['code'] == 'invalid-argument'


@pytest.mark.local_db_test
def test_place_order_in_delivery_session(chalice_gateway):
    create_test_user(id_customer)
    response = make_request(chalice_gateway, endpoint='/orders', method='POST', json_body=order_to_create,
                            token=id_customer, role=ROLE_DELIVERY)

    assert response['statusCode'] == http403
    response_body = json.loads(response['body'])
    assert response_body['code'] == 'permission-denied'
    assert response_body['redirect_to'] == '/'


@pytest.mark.local_db_test
def test_track_order_visible_to_parties_only(chalice_gateway):
    create_test_user(id_customer)
    create_test_user(id_other_customer)
    order_id = create_test_order(chalice_gateway)['id']

    response = make_request(chalice_gateway, endpoint=f'/orders/{order_id}', token=id_customer)
    assert response['statusCode'] == http200
    assert json.loads(response['body'])['id'] == order_id

    response = make_request(chalice_gateway, endpoint=f'/orders/{order_id}', token=id_other_customer)
    assert response['statusCode'] == http404


@pytest.mark.local_db_test
def test_customer_order_lists(chalice_gateway):
    create_test_user(id_customer)
    create_test_user(id_other_customer)
    first_order_id = create_test_order(chalice_gateway)['id']
    second_order_id = create_test_order(chalice_gateway)['id']
    create_test_order(chalice_gateway, customer_id=id_other_customer)

    response = make_request(chalice_gateway, endpoint='/orders/active', token=id_customer, role=ROLE_CUSTOMER)
    assert response['statusCode'] == http200
    response_body = json.loads(response['body'])
    assert {order['id'] for order in response_body['orders']} == {first_order_id, second_order_id}
    dates = [order['date_created'] for order in response_body['orders']]
    assert dates == sorted(dates, reverse=True)
    assert response_body['delivered_count'] == 0

    response = make_request(chalice_gateway, endpoint='/orders/past', token=id_customer)
    assert json.loads(response['body'])['orders'] == []
