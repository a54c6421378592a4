import os
from typing import Dict, Optional

from botocore.exceptions import ClientError
from chalice import Response
from pycognito import Cognito

from chalicelib.constants.constants import DEFAULT_ALLOWED_EMAIL_DOMAIN, ROLES, ROLE_CUSTOMER
from chalicelib.constants.status_codes import http200, http201
from chalicelib.users import User
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data, exceptions
from chalicelib.utils.boto_clients import cognito_client
from chalicelib.utils.logger import logger, set_request_id, log_request
from chalicelib.verifications import VerificationCode


def cognito_pool_id() -> str:
    return os.environ['COGNITO_POOL_ID']


def allowed_email_domain() -> str:
    return os.environ.get('ALLOWED_EMAIL_DOMAIN', DEFAULT_ALLOWED_EMAIL_DOMAIN).lower()


def validate_email(email) -> str:
    if not isinstance(email, str) or '@' not in email:
        raise exceptions.MandatoryFieldsAreNotFilled('Please enter a valid email')
    email = email.strip().lower()
    if not email.endswith(f'@{allowed_email_domain()}'):
        raise exceptions.EmailDomainNotAllowed(f'Please use your @{allowed_email_domain()} email address')
    return email


def validate_role(role, default: Optional[str] = ROLE_CUSTOMER) -> str:
    role = role or default
    if role not in ROLES:
        raise exceptions.ValidationException(f'Role must be one of {ROLES}')
    return role


def check_email_not_registered(email: str) -> None:
    if User.find_by_email(email):
        raise exceptions.EmailAlreadyRegistered(f'User with email {email} already exists')


def cognito_error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


def tokens_body(u: Cognito, user: User, session_role: str) -> Dict:
    return {
        'token': u.id_token,
        'id_token': u.id_token,
        'access_token': u.access_token,
        'refresh_token': u.refresh_token,
        'session_role': session_role,
        'user': user.to_ui()
    }


def request_body(current_request) -> Dict:
    set_request_id(current_request)
    log_request(current_request)
    return utils_data.parse_raw_body(current_request)


@utils_app.log_start_finish
def signup(current_request) -> Response:
    body = request_body(current_request)
    email = validate_email(body.get('email'))
    role = validate_role(body.get('role'))
    check_email_not_registered(email)

    verification = VerificationCode.create(email=email, name=body.get('name'), role=role)
    logger.info(f'signup ::: verification code created for {verification.email}')
    return Response(status_code=http201, body={
        'message': 'Please check your email to finish signing up',
        'email': verification.email
    })


def create_cognito_user(email: str, password: str, name: Optional[str]) -> str:
    user_attributes = [{'Name': 'email', 'Value': email}, {'Name': 'email_verified', 'Value': 'true'}]
    if name:
        user_attributes.append({'Name': 'name', 'Value': name})
    try:
        response = cognito_client.admin_create_user(
            UserPoolId=cognito_pool_id(),
            Username=email,
            UserAttributes=user_attributes,
            MessageAction='SUPPRESS'
        )
        cognito_client.admin_set_user_password(
            UserPoolId=cognito_pool_id(),
            Username=email,
            Password=password,
            Permanent=True
        )
    except ClientError as error:
        if cognito_error_code(error) == 'UsernameExistsException':
            raise exceptions.EmailAlreadyRegistered(f'Cognito user {email} already exists')
        if cognito_error_code(error) in ('InvalidPasswordException', 'InvalidParameterException'):
            raise exceptions.ValidationException(f'Password does not satisfy the policy: {error}')
        raise
    attributes = {attribute['Name']: attribute['Value'] for attribute in response['User'].get('Attributes', [])}
    return attributes.get('sub') or response['User']['Username']


@utils_app.log_start_finish
def complete_signup(current_request) -> Response:
    body = request_body(current_request)
    email = validate_email(body.get('email'))
    password = body.get('password')
    if not isinstance(password, str) or not password:
        raise exceptions.MandatoryFieldsAreNotFilled('Please enter a password')
    try:
        verification = VerificationCode.init_by_email(email)
    except exceptions.RecordNotFound:
        raise exceptions.WrongVerificationCode(f'No verification code issued for {email}')
    verification.check_code(body.get('code'))
    check_email_not_registered(email)

    name = body.get('name') or verification.name
    role = validate_role(body.get('role'), default=verification.role)
    user_id = create_cognito_user(email, password, name)
    user = User.create(id_=user_id, email=email, name=name, role=role, email_verified=True)
    verification.delete()
    logger.info(f'complete_signup ::: user {user_id} registered as {role}')
    return Response(status_code=http201, body={'message': 'Account created', 'user': user.to_ui()})


@utils_app.log_start_finish
def login_cognito(current_request) -> Response:
    body = request_body(current_request)
    email, password = body.get('email'), body.get('password')
    if not email or not password:
        raise exceptions.MandatoryFieldsAreNotFilled('Please enter email and password')
    email = email.strip().lower()

    u = Cognito(cognito_pool_id(), os.environ['COGNITO_POOL_CLIENT_ID'],
                username=email, user_pool_region=os.environ.get('DEFAULT_REGION'))
    try:
        u.authenticate(password=password)
    except ClientError as error:
        logger.warning(f'login_cognito ::: {email=} {cognito_error_code(error)}')
        if cognito_error_code(error) == 'NotAuthorizedException':
            raise exceptions.WrongPassword(f'Wrong password for {email}')
        if cognito_error_code(error) == 'UserNotFoundException':
            raise exceptions.UserNotFound(f'User {email} not found')
        raise

    user_record = User.find_by_email(email)
    if user_record is None:
        raise exceptions.UserNotFound(f'User record for {email} not found')
    user = User(**user_record)
    if not user.email_verified:
        user.mark_email_verified()
    session_role = validate_role(body.get('role'), default=user.role)
    return Response(status_code=http200, body=tokens_body(u, user, session_role))


@utils_app.log_start_finish
def refresh_id_token_cognito(current_request) -> Response:
    body = request_body(current_request)
    refresh_token = body.get('refresh_token')
    if not refresh_token:
        raise exceptions.MandatoryFieldsAreNotFilled('refresh_token is required')

    u = Cognito(cognito_pool_id(), os.environ['COGNITO_POOL_CLIENT_ID'],
                id_token=body.get('id_token'), refresh_token=refresh_token,
                user_pool_region=os.environ.get('DEFAULT_REGION'))
    try:
        u.renew_access_token()
    except ClientError as error:
        raise exceptions.NotAuthorizedException(f'Token refresh failed: {cognito_error_code(error)}')
    logger.debug('refresh_id_token_cognito ::: id token refreshed')
    return Response(status_code=http200, body={
        'status': 'success',
        'id_token': u.id_token,
        'access_token': u.access_token
    })


@utils_app.log_start_finish
def google_sign_in(current_request) -> Response:
    """
    The frontend signs in through the Cognito hosted UI with Google as identity provider
    and sends the resulting id token here
    """
    body = request_body(current_request)
    id_token = body.get('id_token')
    if not id_token:
        raise exceptions.MandatoryFieldsAreNotFilled('id_token is required')
    claims = utils_auth.decode_id_token(id_token)
    email = validate_email(claims.get('email'))

    user = User.init_by_id_or_none(claims['sub'])
    created = user is None
    if created:
        # a password account with this email has a different Cognito sub
        check_email_not_registered(email)
        user = User.create(id_=claims['sub'], email=email, name=claims.get('name'),
                           role=validate_role(body.get('role')), email_verified=True,
                           photo_url=claims.get('picture'))
        logger.info(f'google_sign_in ::: first sign in, user {user.id_} created')
    session_role = validate_role(body.get('role'), default=user.role)
    return Response(status_code=http201 if created else http200, body={
        'session_role': session_role,
        'user': user.to_ui()
    })
