"""Test-series purchases: atomic debit and single entitlement."""

import asyncio

from sqlalchemy import func, select

from aceapt.db.models import UserTestSeries


async def _purchase(client, user, series_id):
    return await client.post(
        "/api/test-series/purchase",
        json={"testSeriesId": series_id},
        headers=user["headers"],
    )


async def _entitlements(db, user_id):
    result = await db.execute(select(func.count(UserTestSeries.id)).where(UserTestSeries.user_id == user_id))
    return result.scalar_one()


class TestPurchase:
    async def test_success_debits_and_grants(self, client, user, catalog, coins, db_session):
        await coins.set(user["user_id"], 30)
        response = await _purchase(client, user, catalog["series_id"])
        assert response.status_code == 200
        assert response.json() == {
            "message": "Successfully purchased Placement Mock Series",
            "remainingCoins": 10,
        }
        assert await coins.get(user["user_id"]) == 10
        assert await _entitlements(db_session, user["user_id"]) == 1

    async def test_exact_balance(self, client, user, catalog, coins):
        await coins.set(user["user_id"], 20)
        response = await _purchase(client, user, catalog["series_id"])
        assert response.status_code == 200
        assert response.json()["remainingCoins"] == 0

    async def test_insufficient_funds_changes_nothing(self, client, user, catalog, coins, db_session):
        await coins.set(user["user_id"], 19)
        response = await _purchase(client, user, catalog["series_id"])
        assert response.status_code == 400
        assert response.json() == {"error": "Not enough coins to purchase this test series"}
        assert await coins.get(user["user_id"]) == 19
        assert await _entitlements(db_session, user["user_id"]) == 0

    async def test_repeat_purchase_conflicts_without_second_debit(self, client, user, catalog, coins, db_session):
        await coins.set(user["user_id"], 100)
        await _purchase(client, user, catalog["series_id"])
        response = await _purchase(client, user, catalog["series_id"])
        assert response.status_code == 409
        assert response.json() == {"error": "You have already purchased this test series"}
        assert await coins.get(user["user_id"]) == 80
        assert await _entitlements(db_session, user["user_id"]) == 1

    async def test_already_owned_wins_over_insufficient_funds(self, client, user, catalog, coins):
        await coins.set(user["user_id"], 20)
        await _purchase(client, user, catalog["series_id"])
        response = await _purchase(client, user, catalog["series_id"])
        assert response.status_code == 409

    async def test_unknown_series(self, client, user, catalog, coins):
        await coins.set(user["user_id"], 100)
        response = await _purchase(client, user, 9999)
        assert response.status_code == 404
        assert response.json() == {"error": "Test series not found"}
        assert await coins.get(user["user_id"]) == 100

    async def test_requires_session(self, client, catalog):
        response = await client.post("/api/test-series/purchase", json={"testSeriesId": catalog["series_id"]})
        assert response.status_code == 401

    async def test_missing_series_id(self, client, user, catalog):
        response = await client.post("/api/test-series/purchase", json={}, headers=user["headers"])
        assert response.status_code == 400

    async def test_purchase_shows_in_listing(self, client, user, catalog, coins):
        await coins.set(user["user_id"], 100)
        await _purchase(client, user, catalog["series_id"])
        response = await client.get("/api/test-series", headers=user["headers"])
        purchased = {item["id"]: item["purchased"] for item in response.json()}
        assert purchased == {catalog["series_id"]: True, catalog["premium_series_id"]: False}


class TestConcurrentPurchase:
    async def test_only_one_of_parallel_purchases_succeeds(self, client, user, catalog, coins, db_session):
        await coins.set(user["user_id"], 25)
        responses = await asyncio.gather(*(_purchase(client, user, catalog["series_id"]) for _ in range(4)))

        statuses = sorted(r.status_code for r in responses)
        assert statuses.count(200) == 1
        assert set(statuses) <= {200, 400, 409}
        assert await coins.get(user["user_id"]) == 5
        assert await _entitlements(db_session, user["user_id"]) == 1

    async def test_parallel_purchases_of_different_series_never_overdraw(
        self, client, user, catalog, coins, db_session
    ):
        await coins.set(user["user_id"], 60)
        responses = await asyncio.gather(
            _purchase(client, user, catalog["series_id"]),
            _purchase(client, user, catalog["premium_series_id"]),
        )
        succeeded = [r for r in responses if r.status_code == 200]
        assert len(succeeded) == 1
        balance = await coins.get(user["user_id"])
        assert balance >= 0
        assert balance in (40, 10)
        assert await _entitlements(db_session, user["user_id"]) == 1
