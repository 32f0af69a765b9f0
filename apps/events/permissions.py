from rest_framework import permissions


class IsEventParticipant(permissions.BasePermission):
    """
    Permission: User must participate in the event.
    """
    message = 'You are not a participant in this event'

    def has_object_permission(self, request, view, obj):
        # obj is an Event instance
        return obj.has_participant(request.user)


class IsEventAdmin(permissions.BasePermission):
    """
    Permission: User must be event owner or admin.
    """
    message = 'Only event owners and admins can do this'

    def has_object_permission(self, request, view, obj):
        # obj is an Event instance
        return obj.is_admin(request.user)
