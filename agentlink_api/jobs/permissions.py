from rest_framework.permissions import BasePermission


class IsJobParticipant(BasePermission):
    """Allows access only to the poster or the current claimer of a job."""

    def has_object_permission(self, request, view, obj):
        return request.user.id in (obj.poster_id, obj.claimer_id)
