"""
Conversation views (controllers).

Thin HTTP layer over ``conversation_service``; the acting user always comes
from the verified bearer token.
"""

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from apps.core.authentication import current_user_id
from .serializers import (
    ConversationSerializer,
    GroupConversationSerializer,
    MemberSerializer,
    OneToOneConversationSerializer,
)
from .services import conversation_service


class ConversationsListView(APIView):
    """
    List all conversations the authenticated user is a member of

    GET /api/conversations/
    """

    def get(self, request):
        conversations = conversation_service.list_conversations_for(current_user_id(request))
        return Response(ConversationSerializer(conversations, many=True).data)


class OneToOneConversationView(APIView):
    """
    Create or fetch the one-to-one conversation between two users

    POST /api/conversations/one-to-one
    Responds 201 when the conversation was created, 200 when it already existed.
    """

    def post(self, request):
        serializer = OneToOneConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation, created = conversation_service.resolve_or_create_one_to_one(
            serializer.validated_data['user_one_id'],
            serializer.validated_data['user_two_id'],
        )
        conversation = conversation_service.get_conversation(conversation.id)

        return Response(
            ConversationSerializer(conversation).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


class GroupConversationView(APIView):
    """
    Create a new group conversation

    POST /api/conversations/group
    """

    def post(self, request):
        serializer = GroupConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation = conversation_service.create_group(
            serializer.validated_data['name'],
            serializer.validated_data['member_ids'],
        )
        conversation = conversation_service.get_conversation(conversation.id)

        return Response(ConversationSerializer(conversation).data, status=status.HTTP_201_CREATED)


class ConversationDetailView(APIView):
    """
    GET /api/conversations/:conversationId
    """

    def get(self, request, conversation_id):
        conversation = conversation_service.get_conversation(conversation_id)
        return Response(ConversationSerializer(conversation).data)


class LeaveConversationView(APIView):
    """
    Leave a conversation

    POST /api/conversations/:conversationId/leave
    """

    def post(self, request, conversation_id):
        conversation_service.leave(conversation_id, current_user_id(request))
        return Response({'message': 'Successfully left the conversation'})


class ConversationMembersView(APIView):
    """
    GET  /api/conversations/:conversationId/members  list members
    POST /api/conversations/:conversationId/members  add members (groups only)
    """

    def get(self, request, conversation_id):
        members = conversation_service.list_members(conversation_id)
        return Response(MemberSerializer(members, many=True).data)

    def post(self, request, conversation_id):
        # Validated by the service after its group-only check
        payload = request.data if isinstance(request.data, dict) else {}
        member_ids = conversation_service.add_members(conversation_id, payload.get('member_ids'))

        return Response({
            'message': 'Members added successfully',
            'memberIds': member_ids,
        })
