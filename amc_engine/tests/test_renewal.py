"""
Tests: Renewal processor — contract creation and period transitions.

Run with:
    pytest amc_engine/tests/test_renewal.py -v
"""

from datetime import datetime, timezone

import pytest

from amc_engine.engine import EntitlementEngine, InvalidInputError
from amc_engine.engine.lifecycle import ContractLifecycle
from amc_engine.engine.renewal import RenewalProcessor
from amc_engine.models.enums import ContractKind, ContractStatus, PaymentStatus
from amc_engine.models.schemas import Contract, PlanInput, RenewalInput


NOW = datetime(2024, 12, 20, tzinfo=timezone.utc)


@pytest.fixture
def processor():
    return RenewalProcessor(ContractLifecycle(30))


@pytest.fixture
def current():
    return Contract(
        customer_ref="CUST-42",
        product_ref="RO-100",
        plan_name="Silver Plan",
        plan_type="Silver",
        start_date="2024-01-01",
        end_date="2025-01-01",
        amount=1999,
        services_used=2,
        services_total=3,
        assigned_technician="EMP-7",
    )


class TestRenew:
    def test_renewal_scenario(self, processor, current):
        result = processor.renew(
            current,
            RenewalInput(
                plan_name="Gold Plan", plan_type="Gold", start_date="2025-01-01",
                duration_months=12, amount=2999, services_total=3,
            ),
            NOW,
        )
        new = result.contract

        assert len(new.history) == len(current.history) + 1
        assert new.history[-1] == result.history_entry
        assert new.services_used == 0
        assert new.services_total == 3
        assert new.start_date == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert new.end_date == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert new.plan_name == "Gold Plan"
        assert new.amount == 2999

    def test_history_entry_snapshots_old_period(self, processor, current):
        result = processor.renew(current, RenewalInput(plan_name="Gold Plan"), NOW)
        entry = result.history_entry

        assert entry.plan_name == "Silver Plan"
        assert entry.start_date == current.start_date
        assert entry.end_date == current.end_date
        assert entry.services_used == 2
        assert entry.status == ContractStatus.EXPIRING_SOON
        assert entry.archived_at == NOW

    def test_history_status_expired_when_renewed_late(self, processor, current):
        late = datetime(2025, 3, 1, tzinfo=timezone.utc)
        result = processor.renew(current, RenewalInput(plan_name="Gold Plan"), late)
        assert result.history_entry.status == ContractStatus.EXPIRED

    def test_start_defaults_to_now(self, processor, current):
        result = processor.renew(
            current, RenewalInput(plan_name="Gold Plan", duration_months=6), NOW
        )
        assert result.contract.start_date == NOW
        assert result.contract.end_date == datetime(2025, 6, 20, tzinfo=timezone.utc)

    def test_month_end_start_clamped(self, processor, current):
        result = processor.renew(
            current,
            RenewalInput(plan_name="Gold Plan", start_date="2025-01-31", duration_months=1),
            NOW,
        )
        assert result.contract.end_date == datetime(2025, 2, 28, tzinfo=timezone.utc)

    def test_subject_carried_forward(self, processor, current):
        result = processor.renew(current, RenewalInput(plan_name="Gold Plan"), NOW)
        new = result.contract
        assert new.customer_ref == "CUST-42"
        assert new.product_ref == "RO-100"
        assert new.assigned_technician == "EMP-7"
        assert new.version == current.version + 1

    def test_payment_terms_from_input(self, processor, current):
        result = processor.renew(
            current,
            RenewalInput.model_validate({
                "planName": "Gold Plan", "amount": "2999", "amountPaid": "1000",
                "paymentStatus": "Paid", "paymentMode": "UPI", "partsIncluded": True,
            }),
            NOW,
        )
        new = result.contract
        assert new.amount_paid == 1000
        assert new.payment_status == PaymentStatus.PAID
        assert new.payment_mode == "UPI"
        assert new.parts_included is True

    def test_current_contract_not_mutated(self, processor, current):
        before = current.model_dump()
        processor.renew(current, RenewalInput(plan_name="Gold Plan"), NOW)
        assert current.model_dump() == before

    def test_repeated_renewals_accumulate_history(self, processor, current):
        first = processor.renew(current, RenewalInput(plan_name="Gold Plan"), NOW)
        second = processor.renew(
            first.contract, RenewalInput(plan_name="Platinum Plan"), datetime(2025, 12, 1, tzinfo=timezone.utc)
        )
        assert [h.plan_name for h in second.contract.history] == ["Silver Plan", "Gold Plan"]
        assert second.contract.version == 3

    def test_missing_contract_rejected(self, processor):
        with pytest.raises(InvalidInputError) as exc:
            processor.renew(None, RenewalInput(plan_name="Gold Plan"), NOW)
        assert exc.value.field == "contract"

    @pytest.mark.parametrize("months", [0, -3])
    def test_non_positive_duration_rejected(self, processor, current, months):
        with pytest.raises(InvalidInputError) as exc:
            processor.renew(current, RenewalInput(plan_name="Gold Plan", duration_months=months), NOW)
        assert exc.value.field == "duration_months"
        assert len(current.history) == 0

    def test_renewed_contract_restarts_active(self, current):
        engine = EntitlementEngine(30)
        result = engine.renew_contract(current, RenewalInput(plan_name="Gold Plan"), NOW)
        assert engine.contract_status(result.contract, NOW).status == ContractStatus.ACTIVE


class TestCreateContract:
    def test_fresh_contract(self, processor):
        contract = processor.create_contract(
            "CUST-9",
            PlanInput(plan_name="Basic RO Rental", kind="rental", amount=499,
                      start_date="2024-05-10", duration_months=12, product_ref="RO-7"),
            NOW,
        )
        assert contract.customer_ref == "CUST-9"
        assert contract.kind == ContractKind.RENTAL
        assert contract.history == []
        assert contract.services_used == 0
        assert contract.version == 1
        assert contract.end_date == datetime(2025, 5, 10, tzinfo=timezone.utc)

    def test_form_defaults(self, processor):
        contract = processor.create_contract("CUST-9", PlanInput(plan_name="Gold Plan"), NOW)
        assert contract.duration_months == 12
        assert contract.services_total == 3
        assert contract.start_date == NOW

    @pytest.mark.parametrize("ref", [None, "", "   "])
    def test_missing_customer_rejected(self, processor, ref):
        with pytest.raises(InvalidInputError) as exc:
            processor.create_contract(ref, PlanInput(plan_name="Gold Plan"), NOW)
        assert exc.value.field == "customer_ref"

    def test_negative_amount_rejected(self, processor):
        with pytest.raises(InvalidInputError) as exc:
            processor.create_contract("CUST-9", PlanInput(plan_name="Gold Plan", amount=-1), NOW)
        assert exc.value.field == "amount"
