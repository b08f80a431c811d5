"""
Message views (controllers).
"""

from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from apps.core.authentication import current_user_id
from .serializers import MessageSerializer, SendMessageSerializer
from .services import message_service


class ConversationMessagesView(APIView):
    """
    GET  /api/conversations/:conversationId/messages  list messages, oldest first
    POST /api/conversations/:conversationId/messages  send a message
    """
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get(self, request, conversation_id):
        messages = message_service.list_messages(conversation_id)
        return Response(MessageSerializer(messages, many=True).data)

    def post(self, request, conversation_id):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = message_service.append_message(
            conversation_id,
            current_user_id(request),
            content=serializer.validated_data.get('content'),
            attachment=serializer.validated_data.get('attachment'),
        )

        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)
