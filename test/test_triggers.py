import os
import time
from uuid import uuid4

import pytest
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from chalicelib import verifications
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLE_CUSTOMER
from chalicelib.utils import db, exceptions
from chalicelib.utils.boto_clients import ses_client
from chalicelib.verifications import VerificationCode, get_verification_link
from test.test_orders import create_test_order, id_customer
from test.utils.request_utils import create_test_user

from test.utils.fixtures import chalice_gateway

serializer = TypeSerializer()


def serialize_image(item: dict) -> dict:
    return {key: serializer.serialize(value) for key, value in item.items()}


def make_stream_event(event_name: str, new_image: dict = None, old_image: dict = None) -> dict:
    image = new_image or old_image
    dynamodb = {
        'ApproximateCreationDateTime': int(time.time()),
        'Keys': serialize_image({'partkey': image['partkey'], 'sortkey': image['sortkey']}),
        'SequenceNumber': '1',
        'SizeBytes': 256,
        'StreamViewType': 'NEW_AND_OLD_IMAGES'
    }
    if new_image:
        dynamodb['NewImage'] = serialize_image(new_image)
    if old_image:
        dynamodb['OldImage'] = serialize_image(old_image)
    return {'Records': [{
        'awsRegion': 'us-east-2',
        'eventID': str(uuid4()),
        'eventName': event_name,
        'eventSource': 'aws:dynamodb',
        'eventSourceARN': os.environ['GEN_TABLE_STREAM_ARN'],
        'eventVersion': '1.1',
        'dynamodb': dynamodb
    }]}


def get_verification_record(email):
    return db.get_db_item(keys_structure.verification_codes_pk,
                          keys_structure.verification_codes_sk.format(email=email))


def sent_emails_count() -> int:
    return int(ses_client.get_send_quota()['SentLast24Hours'])


def test_verification_link():
    assert get_verification_link('jdoe@owu.edu', '123456') == \
        'http://localhost:3000/complete-signup?email=jdoe%40owu.edu&code=123456'


@pytest.mark.local_db_test
def test_verification_code_insert_sends_email(chalice_gateway):
    VerificationCode.create(email='jdoe@owu.edu', name='John Doe', role=ROLE_CUSTOMER)
    record = get_verification_record('jdoe@owu.edu')

    chalice_gateway.lambda_.invoke('db_gen_table_stream_trigger', make_stream_event('INSERT', new_image=record))

    assert sent_emails_count() == 1
    record = get_verification_record('jdoe@owu.edu')
    assert record['email_sent'] is True
    assert record['processed_at']


@pytest.mark.local_db_test
def test_verification_code_update_does_not_resend(chalice_gateway):
    VerificationCode.create(email='jdoe@owu.edu', name='John Doe', role=ROLE_CUSTOMER)
    record = get_verification_record('jdoe@owu.edu')

    chalice_gateway.lambda_.invoke('db_gen_table_stream_trigger',
                                   make_stream_event('MODIFY', new_image={**record, 'email_sent': True},
                                                     old_image=record))

    assert sent_emails_count() == 0


@pytest.mark.local_db_test
def test_failed_record_does_not_stop_the_batch(chalice_gateway, monkeypatch):
    send_email_ses = verifications.send_email_ses

    def send_email_rejected_for_jdoe(emails_to, **kwargs):
        if 'jdoe@owu.edu' in emails_to:
            raise ClientError({'Error': {'Code': 'MessageRejected', 'Message': 'Email address is not verified.'}},
                              'SendEmail')
        return send_email_ses(emails_to=emails_to, **kwargs)

    monkeypatch.setattr(verifications, 'send_email_ses', send_email_rejected_for_jdoe)
    VerificationCode.create(email='jdoe@owu.edu', name='John Doe', role=ROLE_CUSTOMER)
    VerificationCode.create(email='asmith@owu.edu', name='Ann Smith', role=ROLE_CUSTOMER)
    event = make_stream_event('INSERT', new_image=get_verification_record('jdoe@owu.edu'))
    event['Records'] += make_stream_event('INSERT', new_image=get_verification_record('asmith@owu.edu'))['Records']

    response = chalice_gateway.lambda_.invoke('db_gen_table_stream_trigger', event)

    assert response.payload is None
    assert get_verification_record('jdoe@owu.edu')['email_sent'] is False
    assert get_verification_record('asmith@owu.edu')['email_sent'] is True
    assert sent_emails_count() == 1


@pytest.mark.local_db_test
def test_used_verification_code_is_not_recreated(chalice_gateway):
    verification = VerificationCode.create(email='jdoe@owu.edu', name='John Doe', role=ROLE_CUSTOMER)
    record = get_verification_record('jdoe@owu.edu')
    verification.delete()

    chalice_gateway.lambda_.invoke('db_gen_table_stream_trigger', make_stream_event('INSERT', new_image=record))

    with pytest.raises(exceptions.RecordNotFound):
        get_verification_record('jdoe@owu.edu')


@pytest.mark.local_db_test
def test_order_records_are_handled(chalice_gateway):
    create_test_user(id_customer)
    order = create_test_order(chalice_gateway)
    record = db.get_db_item(keys_structure.orders_pk, keys_structure.orders_sk.format(order_id=order['id']))

    chalice_gateway.lambda_.invoke('db_gen_table_stream_trigger', make_stream_event('INSERT', new_image=record))
    chalice_gateway.lambda_.invoke('db_gen_table_stream_trigger',
                                   make_stream_event('MODIFY', new_image={**record, 'status': 'waiting'},
                                                     old_image=record))

    assert sent_emails_count() == 0
