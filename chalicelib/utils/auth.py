import functools
import os
from typing import Dict, Optional

import jwt
from chalice.app import Request

from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ROLES, SESSION_ROLE_HEADER
from chalicelib.utils import exceptions as utils_exceptions, db as utils_db
from chalicelib.utils.logger import log_request, logger, set_request_id


def cognito_issuer() -> str:
    return f"https://cognito-idp.{os.environ.get('DEFAULT_REGION')}.amazonaws.com/{os.environ.get('COGNITO_POOL_ID')}"


@functools.lru_cache(maxsize=None)
def get_jwks_client(jwk_url: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(jwk_url)


def decode_id_token(token: str) -> Dict:
    """
    Verifies a Cognito id token against the user pool JWKS and returns its claims
    """
    try:
        signing_key = get_jwks_client(os.environ['COGNITO_JWK_URL']).get_signing_key_from_jwt(token)
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=['RS256'],
            audience=os.environ.get('COGNITO_POOL_CLIENT_ID'),
            issuer=cognito_issuer()
        )
    except jwt.PyJWTError as error:
        raise utils_exceptions.NotAuthorizedException(f'Invalid id token: {error}')
    logger.debug(f"decode_id_token ::: token decoded for sub={claims.get('sub')}")
    return claims


def get_user_id_by_token(token: Optional[str]) -> str:
    if not token:
        raise utils_exceptions.NotAuthorizedException('Authorization header is missing')
    if token.lower().startswith('bearer '):
        token = token[len('bearer '):]
    if not os.environ.get('COGNITO_JWK_URL'):
        # local stage: the header carries the user id itself
        return token
    return decode_id_token(token)['sub']


def get_user_item(user_id: str) -> Dict:
    try:
        return utils_db.get_db_item(
            partkey=keys_structure.users_pk,
            sortkey=keys_structure.users_sk.format(user_id=user_id)
        )
    except utils_exceptions.RecordNotFound:
        raise utils_exceptions.NotAuthorizedException(f'User {user_id} is not registered')


def get_session_role(request: Request, account_role: Optional[str]) -> Optional[str]:
    session_role = (request.headers or {}).get(SESSION_ROLE_HEADER)
    if session_role in ROLES:
        return session_role
    return account_role


def check_session_role(auth_result: Dict, role: Optional[str]):
    if role is not None and auth_result.get('session_role') != role:
        raise utils_exceptions.AccessDenied(
            f"Session role {auth_result.get('session_role')} has no access, {role} is required")


def authenticate_request(request: Request) -> Dict:
    set_request_id(request)
    log_request(request)
    user_id = get_user_id_by_token((request.headers or {}).get('authorization'))
    user_item = get_user_item(user_id)
    auth_result = {
        'user_id': user_id,
        'role': user_item.get('role'),
        'session_role': get_session_role(request, user_item.get('role')),
        'name': user_item.get('name') or user_item.get('display_name'),
        'email': user_item.get('email')
    }
    setattr(request, 'auth_result', auth_result)
    return auth_result


def authenticate(func=None, *, role: Optional[str] = None):
    """
    Wrapper for functions which require user's authentication,
    the request is the first argument
    """
    if func is None:
        return functools.partial(authenticate, role=role)

    @functools.wraps(func)
    def result_auth(*args, **kwargs):
        auth_result = authenticate_request(args[0])
        check_session_role(auth_result, role)
        result = func(*args, **kwargs)
        logger.info(f'authenticate ::: SUCCESS, func.__name__ {func.__name__}')
        return result

    return result_auth


def authenticate_class(func=None, *, role: Optional[str] = None):
    """
    Wrapper for class methods which require user's authentication,
    the request follows the class
    """
    if func is None:
        return functools.partial(authenticate_class, role=role)

    @functools.wraps(func)
    def result_auth(*args, **kwargs):
        auth_result = authenticate_request(args[1])
        check_session_role(auth_result, role)
        return func(*args, **kwargs)

    return result_auth
