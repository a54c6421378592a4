import json
import os

# boto3 clients are created on import of chalicelib, moto has to be imported first to intercept them
import moto  # noqa: F401

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

with open(os.path.join(PROJECT_DIR, '.chalice', 'config.json')) as config_file:
    _config = json.load(config_file)

os.environ.update({
    'AWS_ACCESS_KEY_ID': 'testing',
    'AWS_SECRET_ACCESS_KEY': 'testing',
    'AWS_SECURITY_TOKEN': 'testing',
    'AWS_SESSION_TOKEN': 'testing',
    'AWS_DEFAULT_REGION': 'us-east-2',
    **_config['environment_variables'],
    **_config['stages']['test']['environment_variables']
})
os.environ.pop('COGNITO_JWK_URL', None)
os.environ.pop('ENDPOINT_URL', None)
