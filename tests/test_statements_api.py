from decimal import Decimal

from fastapi.testclient import TestClient

from avizier.api.dependencies import get_db
from avizier.main import app
from avizier.models.models import Expense, Payment, Unit


def _override_get_db(session):
    def _inner():
        try:
            yield session
        finally:
            pass

    return _inner


def test_statement_endpoint_returns_rounded_lines(db_session, seed_two_units):
    seeded = seed_two_units()
    association_id = seeded["association"].id
    first = seeded["units"][0]
    db_session.add(Payment(unit_id=first.id, amount=Decimal("50"), attributed_month=1, attributed_year=2025))
    db_session.commit()

    client = TestClient(app)
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        response = client.get(
            f"/associations/{association_id}/statements/2025/2",
            params={"as_of": "2025-02-14T00:00:00"},
        )
        assert response.status_code == 200
        payload = response.json()
        assert payload["year"] == 2025 and payload["month"] == 2
        assert payload["has_expenses"] is False
        assert payload["penalties_applied"] is True
        lines = {line["label"]: line for line in payload["units"]}
        assert Decimal(lines["A-1"]["total"]) == Decimal("0")
        assert Decimal(lines["A-2"]["arrears"]) == Decimal("50")
        assert Decimal(lines["A-2"]["penalty"]) == Decimal("0.20")
        assert Decimal(lines["A-2"]["total"]) == Decimal("50.20")
        assert Decimal(payload["totals"]["total"]) == Decimal("50.20")
    finally:
        client.close()
        app.dependency_overrides.clear()


def test_unit_endpoint_and_receipts_agree(db_session, seed_two_units):
    seeded = seed_two_units()
    association_id = seeded["association"].id
    second = seeded["units"][1]

    client = TestClient(app)
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        params = {"as_of": "2025-02-14T00:00:00"}
        unit_resp = client.get(f"/associations/{association_id}/statements/2025/2/units/{second.id}", params=params)
        assert unit_resp.status_code == 200
        receipts_resp = client.get(
            f"/associations/{association_id}/receipts/2025/2",
            params={**params, "start_number": 100},
        )
        assert receipts_resp.status_code == 200
        receipts = receipts_resp.json()
        assert [receipt["number"] for receipt in receipts] == [100, 101]
        receipt = next(item for item in receipts if item["unit_id"] == second.id)
        assert Decimal(receipt["total"]) == Decimal(unit_resp.json()["total"]) == Decimal("50.20")
        assert receipt["due_date"] == "2025-02-25"
    finally:
        client.close()
        app.dependency_overrides.clear()


def test_statement_endpoint_errors(db_session, seed_two_units):
    seeded = seed_two_units()
    association_id = seeded["association"].id

    client = TestClient(app)
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        assert client.get(f"/associations/{association_id}/statements/2025/13").status_code == 422
        missing = client.get("/associations/999/statements/2025/1")
        assert missing.status_code == 404
        assert "999" in missing.json()["detail"]
        assert client.get(f"/associations/{association_id}/statements/2025/1/units/999").status_code == 404
    finally:
        client.close()
        app.dependency_overrides.clear()


def test_health():
    client = TestClient(app)
    try:
        assert client.get("/health").json() == {"status": "ok"}
    finally:
        client.close()


def test_statement_footer_reconciles_with_printed_rows(db_session, create_association):
    association = create_association()
    db_session.add_all(
        [
            Unit(association_id=association.id, number=str(number), staircase="B", quota_share=1, occupant_count=1)
            for number in (1, 2, 3)
        ]
    )
    db_session.add(
        Expense(
            association_id=association.id,
            category="CURATENIE",
            amount=Decimal("100.00"),
            distribution_mode="COTA_INDIVIZA",
            month=3,
            year=2025,
        )
    )
    db_session.commit()

    client = TestClient(app)
    app.dependency_overrides[get_db] = _override_get_db(db_session)
    try:
        response = client.get(
            f"/associations/{association.id}/statements/2025/3",
            params={"as_of": "2025-03-05T00:00:00"},
        )
        assert response.status_code == 200
        payload = response.json()
        rows = [Decimal(line["total"]) for line in payload["units"]]
        assert rows == [Decimal("33.33")] * 3
        assert Decimal(payload["totals"]["total"]) == Decimal("100.00")
        assert Decimal(payload["totals"]["units_total"]) == sum(rows) == Decimal("99.99")
    finally:
        client.close()
        app.dependency_overrides.clear()
