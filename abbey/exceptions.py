from rest_framework import status
from rest_framework.exceptions import APIException


class NotFound(APIException):
    """
    A referenced user or connection does not exist.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class Conflict(APIException):
    """
    The request collides with the current state of a record
    (duplicate connection, connection already accepted).
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Conflict'
    default_code = 'conflict'


class Forbidden(APIException):
    """
    The actor lacks the relationship role the operation requires.
    """
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Forbidden'
    default_code = 'forbidden'


class InvalidOperation(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid operation'
    default_code = 'invalid_operation'
