import functools
from typing import Callable

from botocore.exceptions import ClientError
from chalice import Response

from chalicelib.constants.constants import ERROR_MESSAGES, LANDING_PAGE
from chalicelib.utils.exceptions import AppException, AccessDenied, PreconditionFailed, ServiceUnavailable
from chalicelib.utils.logger import logger, log_exception

THROTTLING_ERRORS = ('ProvisionedThroughputExceededException', 'ThrottlingException', 'RequestLimitExceeded')


def error_response(error: Exception, msg: str = "", status_code: int = 400, *args, **kwargs):
    log_exception(error, status_code, msg, *args, **kwargs)
    code = getattr(error, 'CODE', 'internal')
    body = {
        'error': str(error),
        'exception': error.__class__.__name__,
        'code': code,
        'message': ERROR_MESSAGES.get(code, ERROR_MESSAGES['internal']),
        'error_id': getattr(logger, 'current_request_id', None),
        'level': getattr(error, 'LEVEL', 'exception')
    }
    if isinstance(error, AccessDenied):
        body['redirect_to'] = LANDING_PAGE
    return Response(
        body=body,
        status_code=status_code,
        headers={'Content-Type': 'application/json'}
    )


def translate_client_error(error: ClientError) -> Exception:
    """
    Maps a botocore error onto the application exception with the same meaning
    """
    error_code = error.response.get('Error', {}).get('Code', '')
    if error_code == 'ConditionalCheckFailedException':
        return PreconditionFailed(error_code)
    if error_code in THROTTLING_ERRORS:
        return ServiceUnavailable(error_code)
    return error


def request_exception_handler(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        try:
            logger.info(f'Calling function {func.__name__}')
            return func(*args, **kwargs)
        except AppException as app_error:
            return error_response(
                error=app_error,
                msg=f'function = {func.__name__} , error = {app_error}',
                status_code=app_error.STATUS_CODE)
        except ClientError as client_error:
            error = translate_client_error(client_error)
            return error_response(
                error=error,
                msg=f'function = {func.__name__} , error = {client_error}',
                status_code=getattr(error, 'STATUS_CODE', 500))
        except Exception as exception:
            return error_response(
                error=exception,
                msg=f'function = {func.__name__}, error = {exception}',
                status_code=500)
    return result


def log_start_finish(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        logger.info(f'{func.__name__} ::: started')
        response = func(*args, **kwargs)
        logger.info(f'{func.__name__} ::: finished')
        return response
    return result
