"""Tests for messaging and the research assistant stream."""

from __future__ import annotations

import json
import uuid
from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from apps.artifacts.models import Artifact
from apps.messaging import models, services
from apps.teams.services import create_team


def _events(response) -> list[tuple[str, dict]]:
    body = b"".join(response.streaming_content).decode("utf-8")
    events = []
    for block in body.strip().split("\n\n"):
        event_line, data_line = block.split("\n")
        data = json.loads(data_line.removeprefix("data: "))
        events.append((event_line.removeprefix("event: "), data))
    return events


@pytest.mark.django_db()
@pytest.mark.parametrize(
    "targets",
    [{}, {"recipient_id": uuid.uuid4(), "team_id": uuid.uuid4()}],
)
def test_send_message_requires_exactly_one_target(targets):
    with pytest.raises(services.InvalidMessageTarget):
        services.send_message(sender_id=uuid.uuid4(), content="hello", **targets)

    assert models.Message.objects.count() == 0


@pytest.mark.django_db()
def test_direct_conversation_includes_both_directions_only():
    alice, bob, carol = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    services.send_message(sender_id=alice, recipient_id=bob, content="first")
    services.send_message(sender_id=bob, recipient_id=alice, content="second")
    services.send_message(sender_id=carol, recipient_id=alice, content="elsewhere")

    messages = services.conversation(alice, peer_id=bob)

    assert [message.content for message in messages] == ["first", "second"]


@pytest.mark.django_db()
def test_message_api_posts_and_lists_team_thread():
    client = APIClient()
    sender = uuid.uuid4()
    team = create_team(name="Global Research Hub", created_by=sender)
    artifact = Artifact.objects.create(title="Cuneiform Tablet")

    response = client.post(
        reverse("messaging:message-list"),
        {
            "sender_id": str(sender),
            "team_id": str(team.id),
            "content": "I've shared a new scholarly report: Cuneiform Tablet",
            "artifact_id": str(artifact.id),
        },
        format="json",
    )
    assert response.status_code == 201
    assert response.json()["artifact_title"] == "Cuneiform Tablet"

    listed = client.get(
        reverse("messaging:message-list"), {"user": str(sender), "team": str(team.id)}
    )
    assert listed.status_code == 200
    assert [item["team_id"] for item in listed.json()["results"]] == [str(team.id)]


@pytest.mark.django_db()
def test_message_api_rejects_ambiguous_targets():
    client = APIClient()
    sender = uuid.uuid4()

    neither = client.post(
        reverse("messaging:message-list"),
        {"sender_id": str(sender), "content": "hello"},
        format="json",
    )
    unknown_team = client.post(
        reverse("messaging:message-list"),
        {"sender_id": str(sender), "content": "hello", "team_id": str(uuid.uuid4())},
        format="json",
    )
    listing = client.get(reverse("messaging:message-list"), {"user": str(sender)})

    assert neither.status_code == 400
    assert unknown_team.status_code == 400
    assert listing.status_code == 400


@pytest.mark.django_db()
def test_assistant_requires_api_key(settings):
    settings.OPENROUTER_API_KEY = None

    response = APIClient().post(
        reverse("messaging:assistant"), {"message": "@ale hi"}, format="json"
    )

    assert response.status_code == 500
    assert response.json() == {"error": "AI Configuration Missing"}


@pytest.mark.django_db()
def test_assistant_streams_tokens_and_stores_reply(settings):
    settings.OPENROUTER_API_KEY = "test-key"
    sender = uuid.uuid4()

    with patch(
        "apps.messaging.api.stream_assistant_reply",
        return_value=iter(["<think>dating</think>", " Late ", "Bronze."]),
    ) as mock_stream:
        response = APIClient().post(
            reverse("messaging:assistant"),
            {"message": "@ale date this kylix", "senderId": str(sender)},
            format="json",
        )
        events = _events(response)

    assert response["Content-Type"] == "text/event-stream"
    assert [name for name, _ in events] == ["token", "token", "token", "done"]
    assert events[-1][1]["content"] == "<think>dating</think> Late Bronze."
    assert mock_stream.call_args.args[0] == "@ale date this kylix"

    reply = models.Message.objects.get(pk=events[-1][1]["message_id"])
    assert reply.sender_id == services.ASSISTANT_SENDER_ID
    assert reply.recipient_id == sender


@pytest.mark.django_db()
def test_assistant_stream_reports_errors(settings):
    settings.OPENROUTER_API_KEY = "test-key"

    def failing_stream(*args, **kwargs):
        yield "partial"
        raise RuntimeError("upstream closed")

    with patch("apps.messaging.api.stream_assistant_reply", side_effect=failing_stream):
        response = APIClient().post(
            reverse("messaging:assistant"), {"message": "hi"}, format="json"
        )
        events = _events(response)

    assert events == [("token", {"text": "partial"}), ("error", {"detail": "upstream closed"})]
    assert models.Message.objects.count() == 0
