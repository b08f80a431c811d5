"""
Tests for conversation resolution and membership management.
"""

import threading
import uuid

import pytest
from django.db import connection

from apps.conversations.models import Conversation, ConversationMember
from apps.conversations.services import ConversationService, conversation_service
from apps.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)


def member_ids(conversation):
    return {
        str(user_id)
        for user_id in ConversationMember.objects.filter(
            conversation=conversation
        ).values_list('user_id', flat=True)
    }


@pytest.mark.django_db
class TestResolveOneToOne:

    def test_creates_conversation_with_exactly_both_users(self, alice, bob):
        conversation, created = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        assert created is True
        assert conversation.type == Conversation.ONE_TO_ONE
        assert conversation.name is None
        assert member_ids(conversation) == {str(alice.id), str(bob.id)}

    def test_second_call_returns_same_conversation(self, alice, bob):
        first, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)
        second, created = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        assert created is False
        assert second.id == first.id
        assert Conversation.objects.filter(type=Conversation.ONE_TO_ONE).count() == 1

    def test_argument_order_does_not_matter(self, alice, bob):
        first, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)
        second, created = conversation_service.resolve_or_create_one_to_one(bob.id, alice.id)

        assert created is False
        assert second.id == first.id

    def test_accepts_string_ids(self, alice, bob):
        first, _ = conversation_service.resolve_or_create_one_to_one(str(alice.id), bob.id)
        second, _ = conversation_service.resolve_or_create_one_to_one(bob.id, str(alice.id).upper())

        assert second.id == first.id

    def test_distinct_pairs_get_distinct_conversations(self, alice, bob, carol):
        ab, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)
        ac, _ = conversation_service.resolve_or_create_one_to_one(alice.id, carol.id)

        assert ab.id != ac.id

    def test_group_with_same_members_is_not_reused(self, alice, bob):
        group = conversation_service.create_group('Pair group', [alice.id, bob.id])
        conversation, created = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        assert created is True
        assert conversation.id != group.id

    def test_rejects_same_user_twice(self, alice):
        with pytest.raises(ValidationError):
            conversation_service.resolve_or_create_one_to_one(alice.id, alice.id)

    def test_rejects_malformed_id(self, alice):
        with pytest.raises(ValidationError):
            conversation_service.resolve_or_create_one_to_one(alice.id, 'not-a-uuid')

    def test_rejects_missing_id(self, alice):
        with pytest.raises(ValidationError):
            conversation_service.resolve_or_create_one_to_one(alice.id, None)

    def test_unknown_user_is_not_found(self, alice):
        with pytest.raises(NotFoundError) as exc_info:
            conversation_service.resolve_or_create_one_to_one(alice.id, uuid.uuid4())

        assert 'missing' in exc_info.value.details
        assert Conversation.objects.count() == 0

    def test_reattaches_member_who_left(self, alice, bob):
        conversation, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)
        conversation_service.leave(conversation.id, bob.id)

        again, created = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        assert created is False
        assert again.id == conversation.id
        assert member_ids(again) == {str(alice.id), str(bob.id)}
        assert {str(user.id) for user in again.members.all()} == {str(alice.id), str(bob.id)}

    def test_lost_creation_race_returns_existing_conversation(self, alice, bob, monkeypatch):
        existing, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        service = ConversationService()
        real_find = service._find_one_to_one
        calls = {'n': 0}

        def find_after_race(pair_key):
            # The first lookup misses, as if the other request had not committed yet
            calls['n'] += 1
            if calls['n'] == 1:
                return None
            return real_find(pair_key)

        monkeypatch.setattr(service, '_find_one_to_one', find_after_race)

        conversation, created = service.resolve_or_create_one_to_one(bob.id, alice.id)

        assert created is False
        assert conversation.id == existing.id
        assert Conversation.objects.filter(type=Conversation.ONE_TO_ONE).count() == 1
        assert member_ids(conversation) == {str(alice.id), str(bob.id)}

    def test_unresolvable_race_is_a_retryable_conflict(self, alice, bob, monkeypatch):
        conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        service = ConversationService()
        monkeypatch.setattr(service, '_find_one_to_one', lambda pair_key: None)

        with pytest.raises(ConflictError) as exc_info:
            service.resolve_or_create_one_to_one(alice.id, bob.id)

        assert exc_info.value.retryable is True


@pytest.mark.django_db(transaction=True)
def test_concurrent_resolution_yields_single_conversation(alice, bob):
    results = []
    errors = []
    barrier = threading.Barrier(8)

    def worker(index):
        pair = (alice.id, bob.id) if index % 2 else (bob.id, alice.id)
        try:
            barrier.wait()
            conversation, _ = conversation_service.resolve_or_create_one_to_one(*pair)
            results.append(conversation.id)
        except Exception as e:
            errors.append(e)
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert len(set(results)) == 1
    assert Conversation.objects.filter(type=Conversation.ONE_TO_ONE).count() == 1


@pytest.mark.django_db
class TestCreateGroup:

    def test_members_are_exactly_the_given_users(self, alice, bob, carol):
        group = conversation_service.create_group('Team', [alice.id, bob.id, carol.id])

        assert group.type == Conversation.GROUP
        assert group.name == 'Team'
        assert member_ids(group) == {str(alice.id), str(bob.id), str(carol.id)}

    def test_single_member_group_is_allowed(self, alice):
        group = conversation_service.create_group('Notes', [alice.id])

        assert member_ids(group) == {str(alice.id)}

    def test_duplicate_ids_are_collapsed(self, alice, bob):
        group = conversation_service.create_group('Team', [alice.id, bob.id, str(alice.id)])

        assert ConversationMember.objects.filter(conversation=group).count() == 2

    def test_groups_are_never_deduplicated(self, alice, bob):
        first = conversation_service.create_group('Team', [alice.id, bob.id])
        second = conversation_service.create_group('Team', [alice.id, bob.id])

        assert first.id != second.id
        assert Conversation.objects.filter(type=Conversation.GROUP).count() == 2

    @pytest.mark.parametrize('name', ['', '   ', None])
    def test_name_is_required(self, alice, name):
        with pytest.raises(ValidationError):
            conversation_service.create_group(name, [alice.id])

    def test_empty_member_list_is_rejected(self):
        with pytest.raises(ValidationError):
            conversation_service.create_group('Team', [])

    def test_unknown_member_creates_nothing(self, alice):
        with pytest.raises(NotFoundError):
            conversation_service.create_group('Team', [alice.id, uuid.uuid4()])

        assert Conversation.objects.count() == 0


@pytest.mark.django_db
class TestQueries:

    def test_list_conversations_for_user(self, alice, bob, carol):
        ab, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)
        group = conversation_service.create_group('Team', [alice.id, carol.id])
        conversation_service.resolve_or_create_one_to_one(bob.id, carol.id)

        listed = conversation_service.list_conversations_for(alice.id)

        assert {c.id for c in listed} == {ab.id, group.id}

    def test_list_conversations_for_user_without_any(self, alice):
        assert conversation_service.list_conversations_for(alice.id) == []

    def test_get_conversation_includes_members(self, alice, bob):
        created, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        conversation = conversation_service.get_conversation(created.id)

        assert {str(user.id) for user in conversation.members.all()} == {str(alice.id), str(bob.id)}

    def test_get_unknown_conversation(self):
        with pytest.raises(NotFoundError):
            conversation_service.get_conversation(uuid.uuid4())

    def test_get_with_malformed_id(self):
        with pytest.raises(ValidationError):
            conversation_service.get_conversation('abc')

    def test_list_members_sorted_by_name(self, alice, bob, carol):
        group = conversation_service.create_group('Team', [carol.id, alice.id, bob.id])

        members = conversation_service.list_members(group.id)

        assert [user.name for user in members] == ['Alice', 'Bob', 'Carol']


@pytest.mark.django_db
class TestLeave:

    def test_leave_removes_only_that_user(self, alice, bob, carol):
        group = conversation_service.create_group('Team', [alice.id, bob.id, carol.id])

        assert conversation_service.leave(group.id, bob.id) is True
        assert member_ids(group) == {str(alice.id), str(carol.id)}

    def test_leave_twice_is_a_noop(self, alice, bob):
        conversation, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        conversation_service.leave(conversation.id, alice.id)

        assert conversation_service.leave(conversation.id, alice.id) is False
        assert member_ids(conversation) == {str(bob.id)}

    def test_conversation_survives_last_member_leaving(self, alice):
        group = conversation_service.create_group('Solo', [alice.id])

        conversation_service.leave(group.id, alice.id)

        assert Conversation.objects.filter(id=group.id).exists()
        assert member_ids(group) == set()

    def test_leave_unknown_conversation(self, alice):
        with pytest.raises(NotFoundError):
            conversation_service.leave(uuid.uuid4(), alice.id)


@pytest.mark.django_db
class TestAddMembers:

    def test_adds_without_removing_existing(self, alice, bob, carol, sent_events, django_capture_on_commit_callbacks):
        group = conversation_service.create_group('Team', [alice.id])

        with django_capture_on_commit_callbacks(execute=True):
            result = conversation_service.add_members(group.id, [bob.id, carol.id])

        expected = sorted([str(alice.id), str(bob.id), str(carol.id)])
        assert result == expected
        assert member_ids(group) == set(expected)

    def test_existing_members_are_ignored(self, alice, bob, sent_events, django_capture_on_commit_callbacks):
        group = conversation_service.create_group('Team', [alice.id, bob.id])

        with django_capture_on_commit_callbacks(execute=True):
            result = conversation_service.add_members(group.id, [bob.id, bob.id])

        assert result == sorted([str(alice.id), str(bob.id)])
        assert ConversationMember.objects.filter(conversation=group).count() == 2
        assert sent_events == []

    def test_new_members_are_notified(self, alice, bob, carol, sent_events, django_capture_on_commit_callbacks):
        group = conversation_service.create_group('Team', [alice.id])

        with django_capture_on_commit_callbacks(execute=True):
            conversation_service.add_members(group.id, [bob.id, carol.id])

        notified = {user_id for user_id, event_type, _ in sent_events if event_type == 'conversation_update'}
        assert notified == {str(bob.id), str(carol.id)}
        payload = sent_events[0][2]['conversation']
        assert payload['id'] == str(group.id)
        assert len(payload['members']) == 3

    def test_one_to_one_is_forbidden(self, alice, bob, carol):
        conversation, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            conversation_service.add_members(conversation.id, [carol.id])

        assert member_ids(conversation) == {str(alice.id), str(bob.id)}

    @pytest.mark.parametrize('payload', [None, [], 'abc', ['not-a-uuid']])
    def test_one_to_one_is_forbidden_whatever_the_input(self, alice, bob, payload):
        conversation, _ = conversation_service.resolve_or_create_one_to_one(alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            conversation_service.add_members(conversation.id, payload)

    @pytest.mark.parametrize('payload', [None, [], 'abc', ['not-a-uuid']])
    def test_invalid_input_for_group(self, alice, payload):
        group = conversation_service.create_group('Team', [alice.id])

        with pytest.raises(ValidationError):
            conversation_service.add_members(group.id, payload)

    def test_unknown_user_adds_nobody(self, alice, bob):
        group = conversation_service.create_group('Team', [alice.id])

        with pytest.raises(NotFoundError):
            conversation_service.add_members(group.id, [bob.id, uuid.uuid4()])

        assert member_ids(group) == {str(alice.id)}

    def test_update_failure_does_not_fail_the_add(
        self, alice, bob, sent_events, monkeypatch, django_capture_on_commit_callbacks
    ):
        from apps.conversations import serializers

        def broken(*args, **kwargs):
            raise RuntimeError('serializer exploded')

        group = conversation_service.create_group('Team', [alice.id])
        monkeypatch.setattr(serializers.ConversationSerializer, 'to_representation', broken)

        with django_capture_on_commit_callbacks(execute=True):
            result = conversation_service.add_members(group.id, [bob.id])

        assert result == sorted([str(alice.id), str(bob.id)])
        assert member_ids(group) == {str(alice.id), str(bob.id)}
        assert sent_events == []
