"""
Utilities for the API
"""
from contextlib import contextmanager

from django.core import exceptions
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError

from ..exceptions import ConcurrencyConflict


class Conflict(APIException):
    """
    The write collided with another writer on the same board.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The board was changed by someone else. Please reload and try again."
    default_code = "conflict"


@contextmanager
def api_errors(not_found_message: str = "Not found"):
    """
    Context manager that turns errors raised by the boards API into the
    matching DRF responses: 400 for invalid input, 404 for missing objects
    and 409 for concurrent writes.
    """
    try:
        yield
    except exceptions.ObjectDoesNotExist as e:
        raise Http404(not_found_message) from e
    except exceptions.ValidationError as e:
        raise ValidationError(e.messages) from e
    except ConcurrencyConflict as e:
        raise Conflict(str(e)) from e
    except IndexError as e:
        raise ValidationError(str(e)) from e
