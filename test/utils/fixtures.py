import os

import pytest
from chalice.test import Client
from moto import mock_aws

from app import app
from chalicelib.utils import db
from chalicelib.utils.boto_clients import s3_client, ses_client

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def create_gen_table():
    db.get_gen_table().meta.client.create_table(
        TableName=os.environ['GEN_TABLE_NAME'],
        KeySchema=[
            {'AttributeName': 'partkey', 'KeyType': 'HASH'},
            {'AttributeName': 'sortkey', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'partkey', 'AttributeType': 'S'},
            {'AttributeName': 'sortkey', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST',
        StreamSpecification={'StreamEnabled': True, 'StreamViewType': 'NEW_AND_OLD_IMAGES'}
    )


def create_photos_bucket():
    s3_client.create_bucket(
        Bucket=os.environ['PHOTOS_BUCKET_NAME'],
        CreateBucketConfiguration={'LocationConstraint': s3_client.meta.region_name}
    )


@pytest.fixture
def chalice_gateway() -> Client:
    with mock_aws():
        create_gen_table()
        create_photos_bucket()
        ses_client.verify_email_identity(EmailAddress=os.environ['EMAIL_FROM'])
        with Client(app, stage_name='test', project_dir=PROJECT_DIR) as client:
            yield client
