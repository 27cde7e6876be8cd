"""REST API endpoints for messages and the ALE research assistant."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from django.conf import settings
from django.http import StreamingHttpResponse
from django.urls import path
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.artifacts.services.openrouter import OpenRouterCredentials, stream_assistant_reply
from apps.core.posthog import build_langchain_callbacks, capture_exception

from . import serializers, services

logger = logging.getLogger(__name__)

app_name = "messaging"


def _sse(event: str, data: dict[str, Any]) -> bytes:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n".encode("utf-8")


class MessageListCreateView(APIView):
    def get(self, request):
        query = serializers.ConversationQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        messages = services.conversation(
            query.validated_data["user"],
            peer_id=query.validated_data.get("peer"),
            team_id=query.validated_data.get("team"),
        )
        return Response({"results": serializers.MessageSerializer(messages, many=True).data})

    def post(self, request):
        serializer = serializers.MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.send_message(**serializer.validated_data)
        return Response(
            serializers.MessageSerializer(message).data,
            status=status.HTTP_201_CREATED,
        )


class AssistantStreamView(APIView):
    """Server-sent events stream of the assistant's reply."""

    def post(self, request):
        credentials = OpenRouterCredentials.from_settings()
        if not credentials.api_key:
            return Response(
                {"error": "AI Configuration Missing"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        serializer = serializers.AssistantRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prompt = serializer.validated_data["message"]
        sender_id: Optional[uuid.UUID] = serializer.validated_data.get("senderId")
        team_id: Optional[uuid.UUID] = serializer.validated_data.get("teamId")
        distinct_id = str(sender_id) if sender_id else "anonymous"

        callbacks = build_langchain_callbacks(
            distinct_id=distinct_id,
            trace_id=str(uuid.uuid4()),
            properties={"surface": "assistant", "team_id": str(team_id) if team_id else None},
        )

        def event_stream():
            parts: list[str] = []
            try:
                for token in stream_assistant_reply(
                    prompt,
                    credentials=credentials,
                    model=settings.OPENROUTER_ASSISTANT_MODEL,
                    callbacks=callbacks,
                ):
                    parts.append(token)
                    yield _sse("token", {"text": token})
            except Exception as exc:
                logger.exception("Assistant stream failed")
                capture_exception(exc, distinct_id=distinct_id, properties={"surface": "assistant"})
                yield _sse("error", {"detail": str(exc) or "Assistant stream failed"})
                return

            reply = "".join(parts)
            message_id = None
            if reply and (team_id or sender_id):
                message = services.send_message(
                    sender_id=services.ASSISTANT_SENDER_ID,
                    content=reply,
                    team_id=team_id,
                    recipient_id=None if team_id else sender_id,
                )
                message_id = str(message.id)
            yield _sse("done", {"content": reply, "message_id": message_id})

        response = StreamingHttpResponse(event_stream(), content_type="text/event-stream")
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response


urlpatterns = [
    path("", MessageListCreateView.as_view(), name="message-list"),
    path("assistant/", AssistantStreamView.as_view(), name="assistant"),
]
