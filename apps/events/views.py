from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .models import Event
from .serializers import (
    EventSerializer,
    EventListSerializer,
    EventCreateSerializer,
    EventUpdateSerializer,
    EventSummarySerializer,
    JoinEventSerializer,
    ParticipantSerializer,
    ContributionSerializer,
    ContributionCreateSerializer,
)

from apps.events.services import (
    create_event,
    get_event_by_id,
    update_event,
    get_event_summary,
    join_event,
    get_event_participants,
    require_participant,
    add_contribution,
    get_event_contributions,
    # Exceptions
    EventNotFoundError,
    InvalidEventCodeError,
    AlreadyParticipantError,
    NotParticipantError,
    UnsupportedCurrencyError,
    InvalidAmountError,
    InvalidEventStatusError,
    InsufficientPermissionsError,
)


class EventPagination(PageNumberPagination):
    """Custom pagination for events."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class EventViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for events.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all events the user participates in
    create: Create a new event (creator becomes owner)
    retrieve: Get a specific event
    partial_update: Change event settings (owner or admin)
    summary: Counts, totals and recent activity
    """

    serializer_class = EventSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = EventPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        """Return only events where user participates."""
        return Event.objects.filter(
            participations__user=self.request.user
        ).select_related('created_by').distinct()

    def get_serializer_class(self):
        if self.action == 'list':
            return EventListSerializer
        elif self.action == 'create':
            return EventCreateSerializer
        return EventSerializer

    @extend_schema(request=EventCreateSerializer, responses=EventSerializer)
    def create(self, request, *args, **kwargs):
        """Create a new event."""
        serializer = EventCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        extra = {}
        if 'auto_approval_limit' in data:
            extra['auto_approval_limit'] = data['auto_approval_limit']

        try:
            event = create_event(
                name=data['name'],
                creator=request.user,
                currency=data.get('currency'),
                description=data.get('description', ''),
                require_approval=data.get('require_approval', True),
                **extra
            )
        except UnsupportedCurrencyError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        output_serializer = EventSerializer(event, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(request=EventUpdateSerializer, responses=EventSerializer)
    def partial_update(self, request, pk=None, *args, **kwargs):
        """Update event settings."""
        serializer = EventUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            event = update_event(event_id=pk, user=request.user, **serializer.validated_data)
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (InvalidAmountError, InvalidEventStatusError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(EventSerializer(event, context={'request': request}).data)

    @extend_schema(responses=EventSummarySerializer)
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """Participant count, pending expenses, totals and recent activity."""
        try:
            event = get_event_by_id(event_id=pk)
            require_participant(event_id=event.id, user=request.user)
            summary = get_event_summary(event_id=event.id)
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        serializer = EventSummarySerializer(summary, context={'request': request})
        return Response(serializer.data)

    @extend_schema(request=JoinEventSerializer, responses=ParticipantSerializer)
    @action(detail=False, methods=['post'])
    def join(self, request):
        """Join an event using its code."""
        serializer = JoinEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participation = join_event(
                code=serializer.validated_data['code'],
                user=request.user
            )
        except InvalidEventCodeError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except AlreadyParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response({
            'event': EventSerializer(participation.event, context={'request': request}).data,
            'participation': ParticipantSerializer(participation).data,
        }, status=status.HTTP_201_CREATED)

    @extend_schema(responses=ParticipantSerializer(many=True))
    @action(detail=True, methods=['get'])
    def participants(self, request, pk=None):
        """Get all participants of the event in join order."""
        try:
            event = get_event_by_id(event_id=pk)
            require_participant(event_id=event.id, user=request.user)
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        participations = get_event_participants(event_id=event.id)
        serializer = ParticipantSerializer(participations, many=True)
        return Response(serializer.data)

    @extend_schema(request=ContributionCreateSerializer, responses=ContributionSerializer)
    @action(detail=True, methods=['get', 'post'])
    def contributions(self, request, pk=None):
        """List contributions, or add one as the current user."""
        if request.method == 'GET':
            try:
                event = get_event_by_id(event_id=pk)
                require_participant(event_id=event.id, user=request.user)
            except EventNotFoundError as e:
                return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
            except NotParticipantError as e:
                return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

            serializer = ContributionSerializer(get_event_contributions(event_id=event.id), many=True)
            return Response(serializer.data)

        serializer = ContributionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            contribution = add_contribution(
                event_id=pk,
                user=request.user,
                amount=serializer.validated_data['amount'],
                currency=serializer.validated_data.get('currency'),
                notes=serializer.validated_data.get('notes', '')
            )
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (InvalidAmountError, UnsupportedCurrencyError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ContributionSerializer(contribution).data, status=status.HTTP_201_CREATED)
