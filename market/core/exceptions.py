"""Business rule errors raised by service helpers and translated by views"""
from rest_framework import status


class BusinessError(Exception):
    """A request that is well-formed but violates a business rule"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self):
        return self.message


class NotFoundError(BusinessError):
    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(BusinessError):
    status_code = status.HTTP_403_FORBIDDEN
