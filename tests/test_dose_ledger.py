import pytest

from vaccine_scheduler.core.exceptions import ValidationError
from vaccine_scheduler.services.dose_ledger import ConsumeResult, DoseLedger


class TestDoseLedger:

    def test_add_doses_creates_then_increments(self, db):
        ledger = DoseLedger(db)

        assert ledger.add_doses("moderna", 5) == 5
        assert ledger.add_doses("moderna", 3) == 8
        assert ledger.find("moderna").doses == 8

    def test_add_zero_doses_creates_empty_entry(self, db):
        ledger = DoseLedger(db)

        assert ledger.add_doses("pfizer", 0) == 0
        assert ledger.find("pfizer") is not None

    @pytest.mark.parametrize("doses", [-1, 1.5, "3", True, None])
    def test_add_doses_rejects_invalid_count(self, db, doses):
        ledger = DoseLedger(db)

        with pytest.raises(ValidationError):
            ledger.add_doses("moderna", doses)
        assert ledger.find("moderna") is None

    def test_add_doses_rejects_empty_name(self, db):
        with pytest.raises(ValidationError):
            DoseLedger(db).add_doses("", 1)

    def test_try_consume_one_unknown_vaccine(self, db):
        result = DoseLedger(db).try_consume_one("novavax")

        assert result is ConsumeResult.UNKNOWN_VACCINE
        assert not result

    def test_try_consume_one_until_empty(self, db):
        ledger = DoseLedger(db)
        ledger.add_doses("moderna", 1)

        assert ledger.try_consume_one("moderna") is ConsumeResult.CONSUMED
        assert ledger.try_consume_one("moderna") is ConsumeResult.OUT_OF_STOCK
        db.commit()

        assert ledger.available_doses("moderna") == 0

    def test_available_doses_for_unknown_vaccine(self, db):
        assert DoseLedger(db).available_doses("novavax") == 0

    def test_list_stock(self, db):
        ledger = DoseLedger(db)
        ledger.add_doses("pfizer", 0)
        ledger.add_doses("moderna", 2)
        ledger.add_doses("janssen", 1)

        assert [v.name for v in ledger.list_stock()] == ["janssen", "moderna", "pfizer"]
        assert [(v.name, v.doses) for v in ledger.list_stock(only_available=True)] == [
            ("janssen", 1), ("moderna", 2)
        ]

    def test_concurrent_additions_are_not_lost(self, db, run_concurrently):
        results = run_concurrently(
            *[lambda session: DoseLedger(session).add_doses("moderna", 2) for _ in range(6)]
        )

        assert not [r for r in results if isinstance(r, Exception)]
        # Each caller reports the count its own addition produced
        assert sorted(results) == [2, 4, 6, 8, 10, 12]
        assert DoseLedger(db).available_doses("moderna") == 12
