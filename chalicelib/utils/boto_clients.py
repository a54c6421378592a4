import os
import boto3

from botocore.config import Config

main_boto_region = os.environ.get('DEFAULT_REGION', 'us-east-2')
aws_config = Config(retries={'max_attempts': 10}, region_name=main_boto_region)
aws_config_ddb = Config(retries={'max_attempts': 10}, region_name=os.environ.get('AWS_REGION', main_boto_region))

# Cognito Client.
cognito_client = boto3.client('cognito-idp', region_name=main_boto_region)

# Simple Email Service Client.
ses_client = boto3.client('ses', config=aws_config)

# S3 Client.
# Profile photos are uploaded with the low-level client, the bucket is configured per stage.
s3_client = boto3.client('s3', region_name=main_boto_region)
