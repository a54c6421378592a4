import os

from chalicelib.utils.boto_clients import s3_client, main_boto_region
from chalicelib.utils.logger import logger


def photos_bucket():
    return os.environ["PHOTOS_BUCKET_NAME"]


def get_public_url(file_path):
    return f'https://{photos_bucket()}.s3.{main_boto_region}.amazonaws.com/{file_path}'


def upload_file_to_s3(body: bytes, file_path, content_type):
    s3_client.put_object(Body=body, Bucket=photos_bucket(), Key=file_path, ContentType=content_type)
    s3_client.put_object_acl(ACL='public-read', Bucket=photos_bucket(), Key=file_path)
    logger.info(f'upload_file_to_s3:: SUCCESS, file_path:{file_path} ')
    return get_public_url(file_path)
