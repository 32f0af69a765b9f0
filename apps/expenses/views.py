from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import Expense
from .serializers import (
    ExpenseSerializer,
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseListQuerySerializer,
    ExpenseCategorySerializer,
    ReviewExpenseSerializer,
)

from apps.events.services import (
    require_participant,
    EventNotFoundError,
    NotParticipantError,
    UnsupportedCurrencyError,
)
from apps.expenses.services import (
    SplitParticipant,
    create_expense,
    update_expense,
    review_expense,
    delete_expense,
    get_expense_by_id,
    get_event_expenses,
    get_categories,
    # Exceptions
    SplitError,
    ExpenseNotFoundError,
    CategoryNotFoundError,
    ExpenseNotPendingError,
    InvalidReviewActionError,
    RejectionReasonRequiredError,
    InsufficientPermissionsError,
)


class ExpenseViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet
):
    """
    ViewSet for expenses.

    list: Expenses of one event (?event=<uuid>, optional ?status=, ?category=, ?submitted_by=)
    create: Submit an expense and split it
    retrieve: Get one expense with shares
    partial_update: Edit your own pending expense, re-splitting it when needed
    destroy: Delete a pending expense (submitter or approver)
    """

    queryset = Expense.objects.select_related('event', 'submitted_by')
    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_serializer_class(self):
        if self.action == 'create':
            return ExpenseCreateSerializer
        return ExpenseSerializer

    @extend_schema(parameters=[ExpenseListQuerySerializer])
    def list(self, request, *args, **kwargs):
        query = ExpenseListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        try:
            require_participant(event_id=params['event'], user=request.user)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        expenses = get_event_expenses(
            event_id=params['event'],
            status=params.get('status'),
            category_id=params.get('category'),
            submitted_by=params.get('submitted_by'),
        )
        return Response(ExpenseSerializer(expenses, many=True).data)

    def retrieve(self, request, pk=None, *args, **kwargs):
        try:
            expense = get_expense_by_id(expense_id=pk)
            require_participant(event_id=expense.event_id, user=request.user)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        return Response(ExpenseSerializer(expense).data)

    @extend_schema(request=ExpenseCreateSerializer, responses=ExpenseSerializer)
    def create(self, request, *args, **kwargs):
        """Submit an expense."""
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        participants = [
            SplitParticipant(
                user_id=p['user_id'],
                amount=p.get('amount'),
                percentage=p.get('percentage'),
                weight=p.get('weight'),
            )
            for p in data.get('participants', [])
        ]

        try:
            expense = create_expense(
                event_id=data['event'],
                submitter=request.user,
                amount=data['amount'],
                description=data['description'],
                date=data['date'],
                split_type=data['split_type'],
                participants=participants,
                currency=data.get('currency'),
                category_id=data.get('category_id'),
                location=data.get('location', ''),
                vendor=data.get('vendor', ''),
                notes=data.get('notes', ''),
            )
        except EventNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except NotParticipantError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (SplitError, CategoryNotFoundError, UnsupportedCurrencyError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        expense = get_expense_by_id(expense_id=expense.id)
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ExpenseUpdateSerializer, responses=ExpenseSerializer)
    def partial_update(self, request, pk=None, *args, **kwargs):
        """Edit a pending expense."""
        serializer = ExpenseUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        if 'participants' in data:
            data['participants'] = [
                SplitParticipant(
                    user_id=p['user_id'],
                    amount=p.get('amount'),
                    percentage=p.get('percentage'),
                    weight=p.get('weight'),
                )
                for p in data['participants']
            ]

        try:
            expense = update_expense(expense_id=pk, user=request.user, **data)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except (InsufficientPermissionsError, NotParticipantError) as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (ExpenseNotPendingError, SplitError, CategoryNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(get_expense_by_id(expense_id=expense.id)).data)

    def destroy(self, request, pk=None, *args, **kwargs):
        """Delete a pending expense."""
        try:
            delete_expense(expense_id=pk, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ExpenseNotPendingError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    @extend_schema(request=ReviewExpenseSerializer, responses=ExpenseSerializer)
    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        """Approve or reject a pending expense (admins and moderators)."""
        serializer = ReviewExpenseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            expense = review_expense(
                expense_id=pk,
                reviewer=request.user,
                action=serializer.validated_data['action'],
                rejection_reason=serializer.validated_data.get('rejection_reason', '')
            )
        except ExpenseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except (ExpenseNotPendingError, RejectionReasonRequiredError, InvalidReviewActionError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExpenseSerializer(get_expense_by_id(expense_id=expense.id)).data)

    @extend_schema(responses=ExpenseCategorySerializer(many=True))
    @action(detail=False, methods=['get'])
    def categories(self, request):
        """List expense categories."""
        return Response(ExpenseCategorySerializer(get_categories(), many=True).data)
