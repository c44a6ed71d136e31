from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied


class JobNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Job not found.'
    default_code = 'job_not_found'


class NotClaimable(APIException):
    """Claim guard failed. Refresh the job and retry."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Job already claimed or not available.'
    default_code = 'not_claimable'


class Unauthorized(PermissionDenied):
    default_detail = 'You are not allowed to perform this action on this job.'
    default_code = 'unauthorized'


class MissingCoordinates(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Job is missing property coordinates and cannot be geofenced.'
    default_code = 'missing_coordinates'


class InvalidTransition(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This action is not allowed in the job\'s current state.'
    default_code = 'invalid_transition'
