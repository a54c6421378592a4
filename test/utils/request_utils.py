import json
from typing import Optional, Dict

from chalice.test import Client

from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLE_CUSTOMER
from chalicelib.utils import db


def make_request(chalice_gateway: Client, endpoint: str = '/', method: str = 'GET',
                 query: Optional[str] = None, json_body=None, token=None, role=None,
                 headers: Optional[Dict] = None, body: bytes = None) -> Dict:
    """Request to the app through the chalice test client"""
    request_headers = {'Content-Type': 'application/json'}
    if token:
        request_headers['Authorization'] = token
    if role:
        request_headers['X-Session-Role'] = role
    request_headers.update(headers or {})
    if body is None:
        body = json.dumps(json_body).encode() if json_body is not None else b''

    response = chalice_gateway.http.request(
        method=method,
        path=f"{endpoint}?{query}" if query else f"{endpoint}",
        headers=request_headers,
        body=body
    )
    return {'statusCode': response.status_code, 'headers': response.headers, 'body': response.body.decode()}


def create_test_user(user_id: str, role: str = ROLE_CUSTOMER, name: str = 'Test User',
                     email: Optional[str] = None, **kwargs) -> str:
    user_db_record = {
        'partkey': keys_structure.users_pk,
        'sortkey': keys_structure.users_sk.format(user_id=user_id),
        'record_type': 'user',
        'id_': user_id,
        'email': email or f'{user_id}@owu.edu',
        'name': name,
        'display_name': name,
        'role': role,
        'phone': '+17405551234',
        'address': 'Stuyvesant Hall, 112',
        'email_verified': True,
        'date_created': '2024-01-10T21:15:00.000+00:00',
        'date_updated': '2024-01-10T21:15:00.000+00:00',
        **kwargs
    }
    db.put_db_record(user_db_record)
    return user_id
