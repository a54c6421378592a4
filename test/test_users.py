import json

import pytest

from chalicelib.constants.status_codes import http200
from test.utils.request_utils import make_request, create_test_user

from test.utils.fixtures import chalice_gateway

id_user = 'eaa45e81-c17a-4da3-bdee-149919ca531b'


@pytest.mark.local_db_test
def test_user_get(chalice_gateway):
    user_id = create_test_user(id_user, name='Sam Student', email='sstudent@owu.edu')
    response = make_request(chalice_gateway, endpoint='/users', method='GET', token=user_id)

    assert response['statusCode'] == http200
    response_body = json.loads(response['body'])
    assert response_body['id'] == user_id
    assert response_body['email'] == 'sstudent@owu.edu'
    assert response_body['name'] == 'Sam Student'
    assert response_body['role'] == 'customer'
    assert response_body['phone'] == '+17405551234'
    assert response_body['address'] == 'Stuyvesant Hall, 112'
    assert 'partkey' not in response_body
    assert 'sortkey' not in response_body


@pytest.mark.local_db_test
def test_user_get_with_bearer_token(chalice_gateway):
    user_id = create_test_user(id_user)
    response = make_request(chalice_gateway, endpoint='/users', token=f'Bearer {user_id}')
    assert json.loads(response['body'])['id'] == user_id


@pytest.mark.local_db_test
def test_user_update(chalice_gateway):
    user_id = create_test_user(id_user, name='Sam Student', email='sstudent@owu.edu')

    update_body = {
        'role': 'delivery',
        'email': 'someone@else.com',
        'name': 'Samuel Student',
        'phone': '+17405559876',
        'address': 'Bashford Hall, 3',
        'unexpected_field': 'unexpected_value'
    }
    response_put = make_request(chalice_gateway, endpoint='/users', method='PUT', json_body=update_body,
                                token=user_id)
    assert response_put['statusCode'] == http200
    assert json.loads(response_put['body'])['message'] == 'User was successfully updated'

    response_get = make_request(chalice_gateway, endpoint='/users', method='GET', token=user_id)

    response_body = json.loads(response_get['body'])
    assert response_body['id'] == user_id
    assert response_body['role'] == 'customer'
    assert response_body['email'] == 'sstudent@owu.edu'
    assert response_body['name'] == 'Samuel Student'
    assert response_body['display_name'] == 'Sam Student'
    assert response_body['phone'] == '+17405559876'
    assert response_body['address'] == 'Bashford Hall, 3'
    assert 'unexpected_field' not in response_body
    assert response_body['date_updated'] > '2024-01-10T21:15:00.000+00:00'
