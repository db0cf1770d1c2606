"""Integration tests for expense API endpoints"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.helpers import member_headers


@pytest.fixture
def sample_expense_data(alice, bob, charlie):
    """Sample expense data for testing"""
    return {
        "description": "Team Lunch",
        "amount": "300.00",
        "paid_by": alice.id,
        "strategy": "equal",
        "splits": [
            {"member_id": alice.id},
            {"member_id": bob.id},
            {"member_id": charlie.id},
        ],
        "tags": ["food", "food", "work"],
    }


class TestIdentity:
    """X-Member-Id header handling"""

    @pytest.mark.asyncio
    async def test_missing_header(self, client: AsyncClient, sample_expense_data: dict):
        response = await client.post("/api/v1/expenses", json=sample_expense_data)

        assert response.status_code == 401
        assert response.json()["error"]["type"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_unknown_member(self, client: AsyncClient, sample_expense_data: dict):
        response = await client.post(
            "/api/v1/expenses", json=sample_expense_data, headers={"X-Member-Id": "ghost"}
        )

        assert response.status_code == 401


class TestCreateExpense:
    """Test expense creation endpoint"""

    @pytest.mark.asyncio
    async def test_create_expense_equal_split(
        self, client: AsyncClient, sample_expense_data: dict, alice
    ):
        response = await client.post(
            "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["description"] == "Team Lunch"
        assert Decimal(data["amount"]) == Decimal("300.00")
        assert data["split_strategy"] == "equal"
        assert data["status"] == "Pending"
        assert data["tags"] == ["food", "work"]
        assert all(Decimal(s["amount"]) == Decimal("100.00") for s in data["splits"])
        assert [s["accepted"] for s in data["splits"]] == [True, False, False]

    @pytest.mark.asyncio
    async def test_create_expense_percentage_split(self, client: AsyncClient, alice, bob):
        response = await client.post(
            "/api/v1/expenses",
            json={
                "description": "Dinner",
                "amount": "200.00",
                "paid_by": alice.id,
                "strategy": "percentage",
                "splits": [
                    {"member_id": alice.id, "value": "60"},
                    {"member_id": bob.id, "value": "40"},
                ],
            },
            headers=member_headers(alice),
        )

        assert response.status_code == 201
        amounts = [Decimal(s["amount"]) for s in response.json()["splits"]]
        assert amounts == [Decimal("120.00"), Decimal("80.00")]

    @pytest.mark.asyncio
    async def test_create_expense_exact_mismatch(self, client: AsyncClient, alice, bob):
        response = await client.post(
            "/api/v1/expenses",
            json={
                "description": "Dinner",
                "amount": "100",
                "paid_by": alice.id,
                "strategy": "exact",
                "splits": [
                    {"member_id": alice.id, "value": "50"},
                    {"member_id": bob.id, "value": "30"},
                ],
            },
            headers=member_headers(alice),
        )

        assert response.status_code == 400
        assert "must equal total amount" in response.json()["error"]["message"]

    @pytest.mark.asyncio
    async def test_create_expense_unknown_payer(
        self, client: AsyncClient, sample_expense_data: dict, alice
    ):
        sample_expense_data["paid_by"] = "ghost"

        response = await client.post(
            "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
        )

        assert response.status_code == 404


class TestListAndGetExpenses:
    """Test listing and reading entries"""

    @pytest.mark.asyncio
    async def test_list_expenses_newest_first(
        self, client: AsyncClient, sample_expense_data: dict, alice
    ):
        headers = member_headers(alice)
        first = (await client.post("/api/v1/expenses", json=sample_expense_data, headers=headers)).json()
        sample_expense_data["description"] = "Team Dinner"
        second = (await client.post("/api/v1/expenses", json=sample_expense_data, headers=headers)).json()

        response = await client.get("/api/v1/expenses?page_size=1", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data["items"]] == [second["id"]]
        assert data["pagination"] == {
            "page": 1,
            "page_size": 1,
            "total_items": 2,
            "total_pages": 2,
        }

        page_two = (await client.get("/api/v1/expenses?page=2&page_size=1", headers=headers)).json()
        assert [e["id"] for e in page_two["items"]] == [first["id"]]

    @pytest.mark.asyncio
    async def test_get_unknown_expense(self, client: AsyncClient, alice):
        response = await client.get("/api/v1/expenses/nope", headers=member_headers(alice))

        assert response.status_code == 404


class TestAcceptance:
    """Test accept, edit and force-accept endpoints"""

    @pytest.mark.asyncio
    async def test_accept_then_edit_requires_reacceptance(
        self, client: AsyncClient, sample_expense_data: dict, alice, bob
    ):
        created = (
            await client.post(
                "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
            )
        ).json()

        accepted = await client.post(
            f"/api/v1/expenses/{created['id']}/accept", headers=member_headers(bob)
        )
        assert accepted.status_code == 200
        bob_split = next(s for s in accepted.json()["splits"] if s["member_id"] == bob.id)
        assert bob_split["accepted"] is True

        sample_expense_data["amount"] = "450"
        edited = await client.put(
            f"/api/v1/expenses/{created['id']}",
            json=sample_expense_data,
            headers=member_headers(alice),
        )

        assert edited.status_code == 200
        bob_split = next(s for s in edited.json()["splits"] if s["member_id"] == bob.id)
        assert bob_split["accepted"] is False
        assert Decimal(bob_split["previous_amount"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_edit_by_other_member_forbidden(
        self, client: AsyncClient, sample_expense_data: dict, alice, bob
    ):
        created = (
            await client.post(
                "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
            )
        ).json()

        response = await client.put(
            f"/api/v1/expenses/{created['id']}",
            json=sample_expense_data,
            headers=member_headers(bob),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_accept_without_share(self, client: AsyncClient, alice, bob, charlie):
        created = (
            await client.post(
                "/api/v1/expenses",
                json={
                    "description": "Taxi",
                    "amount": "10",
                    "paid_by": alice.id,
                    "splits": [{"member_id": alice.id}, {"member_id": bob.id}],
                },
                headers=member_headers(alice),
            )
        ).json()

        response = await client.post(
            f"/api/v1/expenses/{created['id']}/accept", headers=member_headers(charlie)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_force_accept_inside_grace_period(
        self, client: AsyncClient, sample_expense_data: dict, alice, bob
    ):
        created = (
            await client.post(
                "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
            )
        ).json()

        response = await client.post(
            f"/api/v1/expenses/{created['id']}/force-accept",
            json={"member_id": bob.id},
            headers=member_headers(alice),
        )

        assert response.status_code == 409
        assert response.json()["error"]["type"] == "StateError"


class TestDeleteExpense:
    """Test soft delete endpoint"""

    @pytest.mark.asyncio
    async def test_delete_twice(self, client: AsyncClient, sample_expense_data: dict, alice):
        headers = member_headers(alice)
        created = (await client.post("/api/v1/expenses", json=sample_expense_data, headers=headers)).json()

        assert (await client.delete(f"/api/v1/expenses/{created['id']}", headers=headers)).status_code == 204
        assert (await client.delete(f"/api/v1/expenses/{created['id']}", headers=headers)).status_code == 204

        entry = (await client.get(f"/api/v1/expenses/{created['id']}", headers=headers)).json()
        assert entry["status"] == "Deleted"
        assert entry["deleted_at"] is not None

        listed = (await client.get("/api/v1/expenses", headers=headers)).json()
        assert listed["items"] == []

    @pytest.mark.asyncio
    async def test_delete_by_other_member_forbidden(
        self, client: AsyncClient, sample_expense_data: dict, alice, charlie
    ):
        created = (
            await client.post(
                "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
            )
        ).json()

        response = await client.delete(
            f"/api/v1/expenses/{created['id']}", headers=member_headers(charlie)
        )

        assert response.status_code == 403


class TestItemClaims:
    """Test claiming receipt line items"""

    @pytest.fixture
    def receipt_data(self, alice):
        return {
            "description": "Groceries",
            "amount": "100",
            "paid_by": alice.id,
            "items": [
                {"id": "rice", "description": "Rice", "amount": "40"},
                {"id": "wine", "description": "Wine", "amount": "60"},
            ],
        }

    @pytest.mark.asyncio
    async def test_claim_and_unclaim(self, client: AsyncClient, receipt_data: dict, alice, bob):
        created = (
            await client.post("/api/v1/expenses", json=receipt_data, headers=member_headers(alice))
        ).json()
        assert created["status"] == "Incomplete"
        assert created["split_strategy"] == "exact"

        claimed = await client.post(
            f"/api/v1/expenses/{created['id']}/items/rice/claim", headers=member_headers(bob)
        )

        assert claimed.status_code == 200
        splits = {s["member_id"]: s for s in claimed.json()["splits"]}
        assert Decimal(splits[bob.id]["amount"]) == Decimal("40.00")
        assert Decimal(splits[alice.id]["amount"]) == Decimal("60.00")
        assert splits[bob.id]["accepted"] is True

        unclaimed = await client.delete(
            f"/api/v1/expenses/{created['id']}/items/rice/claim", headers=member_headers(bob)
        )
        splits = {s["member_id"]: s for s in unclaimed.json()["splits"]}
        assert bob.id not in splits
        assert Decimal(splits[alice.id]["amount"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_claim_on_behalf(self, client: AsyncClient, receipt_data: dict, alice, charlie):
        created = (
            await client.post("/api/v1/expenses", json=receipt_data, headers=member_headers(alice))
        ).json()

        claimed = await client.post(
            f"/api/v1/expenses/{created['id']}/items/wine/claim",
            params={"owner_id": charlie.id},
            headers=member_headers(alice),
        )

        splits = {s["member_id"]: s for s in claimed.json()["splits"]}
        assert splits[charlie.id]["accepted"] is False
        assert Decimal(splits[charlie.id]["amount"]) == Decimal("60.00")

    @pytest.mark.asyncio
    async def test_claim_missing_item(self, client: AsyncClient, receipt_data: dict, alice):
        created = (
            await client.post("/api/v1/expenses", json=receipt_data, headers=member_headers(alice))
        ).json()

        response = await client.post(
            f"/api/v1/expenses/{created['id']}/items/nope/claim", headers=member_headers(alice)
        )

        assert response.status_code == 409


class TestPendingActions:
    """Test the pending actions endpoint"""

    @pytest.mark.asyncio
    async def test_pending_for_participant(
        self, client: AsyncClient, sample_expense_data: dict, alice, bob
    ):
        created = (
            await client.post(
                "/api/v1/expenses", json=sample_expense_data, headers=member_headers(alice)
            )
        ).json()

        response = await client.get("/api/v1/expenses/pending", headers=member_headers(bob))

        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data["awaiting_you"]] == [created["id"]]
        assert data["awaiting_others"] == []
        assert data["incomplete"] == []
