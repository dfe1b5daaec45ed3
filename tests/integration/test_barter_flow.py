"""End-to-end barter flow against a real database.

listing -> trade proposal -> accept -> conversation -> message -> notifications
-> exchange request -> two-party trade confirmation -> rating and review.

Run: pytest -m integration tests/integration/test_barter_flow.py -v
"""

from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]

Member = tuple[str, dict[str, str]]


async def _listing(client: AsyncClient, headers: dict[str, str], title: str) -> str:
    resp = await client.post(
        "/api/v1/listings",
        json={
            "title": title,
            "description": f"{title} in good condition",
            "category": "misc",
            "wanted_items": ["anything useful"],
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["data"]["status"] == "ACTIVE"
    return resp.json()["data"]["id"]


async def _notification_types(client: AsyncClient, headers: dict[str, str]) -> list[str]:
    resp = await client.get("/api/v1/notifications", headers=headers)
    assert resp.status_code == 200
    return [n["type"] for n in resp.json()["data"]["items"]]


class TestProposalToChat:
    async def test_accepting_a_proposal_opens_a_chat(
        self, client: AsyncClient, new_member: Callable[[str], Awaitable[Member]]
    ) -> None:
        alice_id, alice = await new_member("Alice")
        bob_id, bob = await new_member("Bob")
        guitar = await _listing(client, bob, "Guitar")
        bike = await _listing(client, alice, "Bike")

        created = await client.post(
            "/api/v1/trade-proposals",
            json={
                "receiver_id": bob_id,
                "target_listing_id": guitar,
                "offered_listing_id": bike,
                "message": "Swap?",
            },
            headers=alice,
        )
        assert created.status_code == 201, created.text
        proposal = created.json()["data"]
        assert proposal["status"] == "pending"
        assert "trade_proposal" in await _notification_types(client, bob)

        # Only the receiver may respond.
        forbidden = await client.post(
            f"/api/v1/trade-proposals/{proposal['id']}/respond",
            json={"status": "accepted"},
            headers=alice,
        )
        assert forbidden.status_code == 403

        accepted = await client.post(
            f"/api/v1/trade-proposals/{proposal['id']}/respond",
            json={"status": "accepted"},
            headers=bob,
        )
        assert accepted.status_code == 200, accepted.text
        conversation_id = accepted.json()["data"]["conversation_id"]
        assert conversation_id
        assert "trade_proposal_accepted" in await _notification_types(client, alice)

        again = await client.post(
            f"/api/v1/trade-proposals/{proposal['id']}/respond",
            json={"status": "declined"},
            headers=bob,
        )
        assert again.status_code == 422

        sent = await client.post(
            f"/api/v1/conversations/{conversation_id}/messages",
            json={"content": "When can we meet?"},
            headers=alice,
        )
        assert sent.status_code == 201, sent.text
        [message] = sent.json()["data"]["items"]
        assert message["receiver_id"] == bob_id

        history = await client.get(
            f"/api/v1/conversations/{conversation_id}/messages", headers=bob
        )
        assert [m["content"] for m in history.json()["data"]["items"]] == ["When can we meet?"]

        read = await client.post(
            "/api/v1/messages/read", json={"message_ids": [message["id"]]}, headers=bob
        )
        assert read.json()["data"]["updated"] == 1
        assert "message" in await _notification_types(client, bob)

        # Opening the same pair again reuses the conversation.
        reopened = await client.post(
            "/api/v1/conversations", json={"other_user_id": alice_id}, headers=bob
        )
        assert reopened.json()["data"]["id"] == conversation_id

    async def test_outsider_cannot_read_chat(
        self, client: AsyncClient, new_member: Callable[[str], Awaitable[Member]]
    ) -> None:
        _, alice = await new_member("Alice")
        bob_id, _ = await new_member("Bob")
        _, mallory = await new_member("Mallory")
        opened = await client.post(
            "/api/v1/conversations", json={"other_user_id": bob_id}, headers=alice
        )
        conversation_id = opened.json()["data"]["id"]

        resp = await client.get(
            f"/api/v1/conversations/{conversation_id}/messages", headers=mallory
        )
        assert resp.status_code == 403


class TestExchangeAndCompletion:
    async def test_exchange_then_trade_completion(
        self, client: AsyncClient, new_member: Callable[[str], Awaitable[Member]]
    ) -> None:
        _, alice = await new_member("Alice")
        bob_id, bob = await new_member("Bob")
        guitar = await _listing(client, bob, "Guitar")
        bike = await _listing(client, alice, "Bike")

        created = await client.post(
            "/api/v1/exchange-requests",
            json={"receiver_id": bob_id, "target_listing_id": guitar, "offered_listing_id": bike},
            headers=alice,
        )
        assert created.status_code == 201, created.text
        request_id = created.json()["data"]["id"]

        accepted = await client.post(
            f"/api/v1/exchange-requests/{request_id}/respond",
            json={"status": "accepted"},
            headers=bob,
        )
        assert accepted.status_code == 200, accepted.text
        conversation = accepted.json()["data"]["conversation"]
        assert conversation["exchange_request_id"] == request_id
        assert "exchange_started" in await _notification_types(client, alice)

        trade = await client.post(
            "/api/v1/trades",
            json={
                "receiver_id": bob_id,
                "listing_id": guitar,
                "initiator_item": "Bike",
                "receiver_item": "Guitar",
            },
            headers=alice,
        )
        assert trade.status_code == 201, trade.text
        trade_id = trade.json()["data"]["id"]

        first = await client.post(f"/api/v1/trades/{trade_id}/confirm", json={}, headers=alice)
        assert first.json()["data"]["status"] == "PENDING"
        twice = await client.post(f"/api/v1/trades/{trade_id}/confirm", json={}, headers=alice)
        assert twice.status_code == 422

        second = await client.post(
            f"/api/v1/trades/{trade_id}/confirm", json={"rating": 5}, headers=bob
        )
        assert second.json()["data"]["status"] == "COMPLETED"

        listing = await client.get(f"/api/v1/listings/{guitar}", headers=alice)
        assert listing.json()["data"]["status"] == "COMPLETED"

        rated = await client.post(
            f"/api/v1/trades/{trade_id}/rating", json={"rating": 4}, headers=alice
        )
        assert rated.status_code == 201, rated.text
        assert rated.json()["data"]["rated_id"] == bob_id
        again = await client.post(
            f"/api/v1/trades/{trade_id}/rating", json={"rating": 1}, headers=alice
        )
        assert again.status_code == 409

        ratings = await client.get(f"/api/v1/users/{bob_id}/ratings", headers=bob)
        assert ratings.json()["data"]["average_rating"] == 4.0

        review = await client.post(
            "/api/v1/reviews",
            json={
                "target_user_id": bob_id,
                "rating": 5,
                "comment": "Guitar exactly as described",
                "trade_id": trade_id,
            },
            headers=alice,
        )
        assert review.status_code == 201, review.text
        assert "review" in await _notification_types(client, bob)
