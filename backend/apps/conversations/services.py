"""
Conversation service.

Resolves one-to-one conversations by their canonicalized member pair, creates
groups and keeps membership consistent. Every operation receives the user
ids it acts on explicitly.
"""

import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from django.db import IntegrityError, transaction

from apps.authentication.models import User
from apps.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from .models import Conversation, ConversationMember

logger = logging.getLogger(__name__)


def normalize_id(value, field: str = 'id') -> str:
    """
    Return the canonical string form of a UUID identifier

    Raises:
        ValidationError: If the value is missing or not a UUID
    """
    if value is None or value == '':
        raise ValidationError(f'{field} is required')
    try:
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(f'{field} must be a valid UUID', details={field: str(value)})


def normalize_ids(values: Iterable, field: str = 'member_ids') -> List[str]:
    """Normalize a list of ids, collapsing duplicates while keeping order"""
    if values is None or isinstance(values, (str, bytes)):
        raise ValidationError(f'{field} must be a list of user ids')
    seen = []
    for value in values:
        normalized = normalize_id(value, field)
        if normalized not in seen:
            seen.append(normalized)
    return seen


def canonical_pair_key(user_a, user_b) -> str:
    """
    Lookup key for the one-to-one conversation between two users

    The pair is sorted so (A, B) and (B, A) produce the same key.
    """
    first, second = sorted([normalize_id(user_a), normalize_id(user_b)])
    return f'{first}:{second}'


class ConversationService:
    """
    Conversation resolution and membership management
    """

    def resolve_or_create_one_to_one(self, user_a, user_b) -> Tuple[Conversation, bool]:
        """
        Fetch the one-to-one conversation for a pair of users, creating it if needed

        Fetching an existing conversation can change its membership: a user
        of the pair who left is added back.

        Args:
            user_a: First user id
            user_b: Second user id (order does not matter)

        Returns:
            Tuple of (Conversation, created)

        Raises:
            ValidationError: If the ids are malformed or identical
            NotFoundError: If either user does not exist
        """
        user_a = normalize_id(user_a, 'user_one_id')
        user_b = normalize_id(user_b, 'user_two_id')
        if user_a == user_b:
            raise ValidationError('A one-to-one conversation needs two distinct users')

        self.require_users([user_a, user_b])
        pair_key = canonical_pair_key(user_a, user_b)

        conversation = self._find_one_to_one(pair_key)
        if conversation is not None:
            self._restore_pair(conversation, [user_a, user_b])
            return conversation, False

        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    type=Conversation.ONE_TO_ONE,
                    pair_key=pair_key,
                )
                ConversationMember.objects.bulk_create([
                    ConversationMember(conversation=conversation, user_id=user_id)
                    for user_id in sorted([user_a, user_b])
                ])
        except IntegrityError:
            # A concurrent request created the pair first
            conversation = self._find_one_to_one(pair_key)
            if conversation is None:
                raise ConflictError(
                    'Conversation could not be created, please retry',
                    retryable=True,
                )
            logger.info(f'Resolved creation race for pair {pair_key} to {conversation.id}')
            self._restore_pair(conversation, [user_a, user_b])
            return conversation, False

        logger.info(f'Created one-to-one conversation {conversation.id} for pair {pair_key}')
        return conversation, True

    def create_group(self, name: str, member_ids: Iterable) -> Conversation:
        """
        Create a new group conversation

        Groups are never deduplicated; every call creates a new conversation.
        """
        name = (name or '').strip()
        if not name:
            raise ValidationError('Group name is required')

        member_ids = normalize_ids(member_ids)
        if not member_ids:
            raise ValidationError('A group needs at least one member')

        self.require_users(member_ids)

        with transaction.atomic():
            conversation = Conversation.objects.create(type=Conversation.GROUP, name=name)
            ConversationMember.objects.bulk_create([
                ConversationMember(conversation=conversation, user_id=user_id)
                for user_id in member_ids
            ])

        logger.info(f'Created group {conversation.id} with {len(member_ids)} members')
        return conversation

    def list_conversations_for(self, user_id) -> List[Conversation]:
        user_id = normalize_id(user_id, 'user_id')
        return list(
            Conversation.objects.filter(memberships__user_id=user_id)
            .prefetch_related('members')
            .distinct()
        )

    def get_conversation(self, conversation_id) -> Conversation:
        return self.require_conversation(conversation_id, with_members=True)

    def leave(self, conversation_id, user_id) -> bool:
        """
        Remove a user from a conversation

        Leaving a conversation the user is not in is a no-op. The conversation
        itself is kept even when it ends up with fewer members.

        Returns:
            True if a membership was removed
        """
        conversation = self.require_conversation(conversation_id)
        user_id = normalize_id(user_id, 'user_id')

        deleted, _ = ConversationMember.objects.filter(
            conversation=conversation,
            user_id=user_id,
        ).delete()

        if deleted:
            logger.info(f'User {user_id} left conversation {conversation.id}')
        return deleted > 0

    def add_members(self, conversation_id, member_ids: Iterable) -> List[str]:
        """
        Add users to a group conversation without removing existing members

        Returns:
            Ids of every member after the call

        Raises:
            ForbiddenError: If the conversation is one-to-one
        """
        conversation = self.require_conversation(conversation_id)
        if not conversation.is_group:
            raise ForbiddenError('Cannot add members to a one-to-one conversation')

        member_ids = normalize_ids(member_ids)
        if not member_ids:
            raise ValidationError('member_ids must contain at least one user id')

        self.require_users(member_ids)

        with transaction.atomic():
            existing = self._member_ids(conversation)
            added = [user_id for user_id in member_ids if user_id not in existing]
            ConversationMember.objects.bulk_create(
                [
                    ConversationMember(conversation=conversation, user_id=user_id)
                    for user_id in added
                ],
                ignore_conflicts=True,
            )
            conversation.save(update_fields=['updated_at'])
            transaction.on_commit(lambda: self._announce(conversation, added))

        if added:
            logger.info(f'Added {len(added)} members to conversation {conversation.id}')
        return sorted(existing.union(added))

    def list_members(self, conversation_id) -> List[User]:
        conversation = self.require_conversation(conversation_id)
        return list(conversation.members.order_by('name', 'email'))

    def require_conversation(self, conversation_id, with_members: bool = False) -> Conversation:
        conversation_id = normalize_id(conversation_id, 'conversation_id')
        queryset = Conversation.objects.all()
        if with_members:
            queryset = queryset.prefetch_related('members')
        try:
            return queryset.get(id=conversation_id)
        except Conversation.DoesNotExist:
            raise NotFoundError('Conversation not found')

    def _find_one_to_one(self, pair_key: str) -> Optional[Conversation]:
        return (
            Conversation.objects.filter(type=Conversation.ONE_TO_ONE, pair_key=pair_key)
            .prefetch_related('members')
            .first()
        )

    def _restore_pair(self, conversation: Conversation, user_ids: List[str]) -> None:
        # A member who left gets re-attached so the pair is complete again
        missing = [user_id for user_id in user_ids if user_id not in self._member_ids(conversation)]
        if not missing:
            return

        ConversationMember.objects.bulk_create(
            [ConversationMember(conversation=conversation, user_id=user_id) for user_id in missing],
            ignore_conflicts=True,
        )
        # Drop the stale prefetch cache
        conversation.refresh_from_db()
        logger.info(f'Re-attached {missing} to one-to-one conversation {conversation.id}')

    def _member_ids(self, conversation: Conversation) -> set:
        return {
            str(user_id)
            for user_id in ConversationMember.objects.filter(
                conversation=conversation
            ).values_list('user_id', flat=True)
        }

    def require_users(self, user_ids: List[str]) -> None:
        found = {
            str(user_id)
            for user_id in User.objects.filter(id__in=user_ids).values_list('id', flat=True)
        }
        missing = [user_id for user_id in user_ids if user_id not in found]
        if missing:
            raise NotFoundError('User not found', details={'missing': missing})

    def _announce(self, conversation: Conversation, user_ids: List[str]) -> None:
        if not user_ids:
            return

        from apps.websocket.services import websocket_service
        from .serializers import ConversationSerializer

        try:
            payload = ConversationSerializer(
                self.require_conversation(conversation.id, with_members=True)
            ).data
        except Exception as e:
            logger.warning(f'Could not prepare update for conversation {conversation.id}: {e}')
            return

        for user_id in user_ids:
            websocket_service.emit_conversation_update(user_id, payload)


# Create singleton instance
conversation_service = ConversationService()
