__all__ = ["AppException", "NotAuthorizedException", "AccessDenied", "RecordNotFound", "OrderNotFound",
           "ValidationException", "MandatoryFieldsAreNotFilled", "EmptyCart", "WrongDeliveryAddress",
           "WrongPaymentDetails", "PreconditionFailed", "OrderAlreadyClaimed", "IllegalStatusTransition",
           "ConversationClosed", "OwnOrder", "EmailDomainNotAllowed", "EmailAlreadyRegistered",
           "WrongVerificationCode", "WrongPassword", "UserNotFound", "ServiceUnavailable"]


class AppException(Exception):
    CODE = 'internal'
    STATUS_CODE = 500
    LEVEL = 'exception'


# Auth exceptions
class NotAuthorizedException(AppException):
    CODE = 'unauthenticated'
    STATUS_CODE = 401
    LEVEL = 'warning'


class WrongPassword(AppException):
    CODE = 'wrong-password'
    STATUS_CODE = 401
    LEVEL = 'warning'


class UserNotFound(AppException):
    CODE = 'user-not-found'
    STATUS_CODE = 404
    LEVEL = 'warning'


class AccessDenied(AppException):
    CODE = 'permission-denied'
    STATUS_CODE = 403
    LEVEL = 'warning'


# DynamoDB exceptions
class RecordNotFound(AppException):
    CODE = 'not-found'
    STATUS_CODE = 404
    LEVEL = 'warning'


class OrderNotFound(RecordNotFound):
    pass


class ServiceUnavailable(AppException):
    CODE = 'unavailable'
    STATUS_CODE = 503
    LEVEL = 'error'


# Validations exceptions
class ValidationException(AppException):
    CODE = 'invalid-argument'
    STATUS_CODE = 400
    LEVEL = 'warning'


class MandatoryFieldsAreNotFilled(ValidationException):
    pass


class EmptyCart(ValidationException):
    pass


class WrongDeliveryAddress(ValidationException):
    pass


class WrongPaymentDetails(ValidationException):
    pass


class EmailDomainNotAllowed(ValidationException):
    pass


class WrongVerificationCode(ValidationException):
    pass


class EmailAlreadyRegistered(AppException):
    CODE = 'already-exists'
    STATUS_CODE = 409
    LEVEL = 'warning'


# Order lifecycle exceptions
class PreconditionFailed(AppException):
    CODE = 'failed-precondition'
    STATUS_CODE = 409
    LEVEL = 'warning'


class OrderAlreadyClaimed(PreconditionFailed):
    pass


class IllegalStatusTransition(PreconditionFailed):
    pass


class ConversationClosed(PreconditionFailed):
    pass


class OwnOrder(PreconditionFailed):
    pass
