from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import Settlement
from .serializers import (
    SettlementSerializer,
    SettlementCreateSerializer,
    CompleteSettlementSerializer,
    SettlementListQuerySerializer,
    UserBalanceSerializer,
    SettlementSummarySerializer,
    GeneratedSettlementsSerializer,
)

from apps.events.permissions import IsEventParticipant, IsEventAdmin
from apps.events.services import (
    get_event_by_id,
    require_participant,
    EventNotFoundError,
    NotParticipantError,
    UnsupportedCurrencyError,
)
from apps.settlements.services import (
    calculate_balances,
    generate_settlements,
    create_custom_settlement,
    complete_settlement,
    get_settlement,
    get_event_settlements,
    get_user_settlements,
    get_settlement_summary,
    # Exceptions
    SettlementNotFoundError,
    InvalidSettlementStateError,
    InsufficientPermissionsError,
    SettlementValidationError,
)


class SettlementViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for settlements.

    list: Settlements of one event (?event=<uuid>, ?mine=true for own only)
    create: Custom settlement paid by the current user
    retrieve: One settlement
    complete: Mark a pending settlement as paid (payer or payee)
    """

    queryset = Settlement.objects.select_related('from_user', 'to_user')
    serializer_class = SettlementSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_serializer_class(self):
        if self.action == 'create':
            return SettlementCreateSerializer
        return SettlementSerializer

    @extend_schema(parameters=[SettlementListQuerySerializer])
    def list(self, request, *args, **kwargs):
        query = SettlementListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        event_id = query.validated_data['event']

        try:
            require_participant(event_id=event_id, user=request.user)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        if query.validated_data['mine']:
            settlements = get_user_settlements(event_id=event_id, user_id=request.user.id)
        else:
            settlements = get_event_settlements(event_id=event_id)

        return Response(SettlementSerializer(settlements, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        try:
            settlement = get_settlement(settlement_id=pk)
            require_participant(event_id=settlement.event_id, user=request.user)
        except SettlementNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(SettlementSerializer(settlement).data)

    @extend_schema(request=SettlementCreateSerializer, responses=SettlementSerializer)
    def create(self, request, *args, **kwargs):
        """Create a custom settlement from the current user."""
        serializer = SettlementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            settlement = create_custom_settlement(
                event_id=data['event'],
                from_user_id=request.user.id,
                to_user_id=data['to_user_id'],
                amount=data['amount'],
                currency=data.get('currency'),
                method=data.get('method', '')
            )
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SettlementValidationError as e:
            return Response(
                {'error': str(e), 'code': e.reason},
                status=status.HTTP_400_BAD_REQUEST
            )
        except UnsupportedCurrencyError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SettlementSerializer(settlement).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CompleteSettlementSerializer, responses=SettlementSerializer)
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Mark a settlement as completed."""
        serializer = CompleteSettlementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            settlement = complete_settlement(
                settlement_id=pk,
                payment_reference=serializer.validated_data['payment_reference'],
                method=serializer.validated_data.get('method', ''),
                completed_by=request.user
            )
        except SettlementNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidSettlementStateError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SettlementSerializer(settlement).data)


def _event_for(request, event_id, permission):
    """
    Load an event and check ``permission`` against it.

    Returns (event, None) or (None, error Response).
    """
    try:
        event = get_event_by_id(event_id=event_id)
    except EventNotFoundError as e:
        return None, Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if not permission.has_object_permission(request, None, event):
        return None, Response(
            {'error': permission.message},
            status=status.HTTP_403_FORBIDDEN
        )
    return event, None


@extend_schema(
    responses={200: UserBalanceSerializer(many=True)},
    description="Net balance of every participant, in join order.",
    tags=['settlements'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def event_balances(request, event_id):
    """Get current balances of an event."""
    event, error = _event_for(request, event_id, IsEventParticipant())
    if error:
        return error

    balances = calculate_balances(event_id=event.id)
    return Response(UserBalanceSerializer(balances, many=True).data)


@extend_schema(
    responses={200: SettlementSummarySerializer},
    description="Balance and settlement totals of an event.",
    tags=['settlements'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def event_summary(request, event_id):
    """Get settlement summary of an event."""
    event, error = _event_for(request, event_id, IsEventParticipant())
    if error:
        return error

    summary = get_settlement_summary(event_id=event.id)
    return Response(SettlementSummarySerializer(summary).data)


@extend_schema(
    request=None,
    responses={201: GeneratedSettlementsSerializer},
    description="Replace pending settlements with a fresh minimal set (event admins).",
    tags=['settlements'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def generate_event_settlements(request, event_id):
    """Generate settlements for an event (admin only)."""
    event, error = _event_for(request, event_id, IsEventAdmin())
    if error:
        return error

    try:
        settlements = generate_settlements(event_id=event.id)
    except EventNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    result = GeneratedSettlementsSerializer({'settlements': settlements, 'count': len(settlements)})
    return Response(result.data, status=status.HTTP_201_CREATED)
