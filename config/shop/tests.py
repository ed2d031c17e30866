from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from io import StringIO
from smtplib import SMTPException
from unittest.mock import patch

from dateutil.relativedelta import relativedelta
from django.contrib.auth.models import Group, User
from django.core import mail
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework.test import APITestCase

from .core.constants import GROUP_SALESMEN
from .core.notifications import build_sale_warranty_message, display_name
from .core.services import (
    SaleService,
    WarrantyService,
    compute_amounts,
    refresh_warranty_statuses,
    warranty_fields_for_create,
    warranty_fields_for_update,
)
from .core.warranty import WarrantyDetails, WarrantyInput, WarrantyStatus, calculate, is_active
from .models import AuditLog, Product, Sale, Warranty
from .warranties.serializers import WarrantyReadSerializer


def aware(*args):
    return timezone.make_aware(datetime(*args))


class WarrantyCalculatorTest(SimpleTestCase):
    def test_twelve_months_from_first_of_january(self):
        """Test 12 meses desde 2025-01-01 termina el 2026-01-01"""
        result = calculate({"warranty_start": "2025-01-01", "warranty_months": 12})

        self.assertEqual(result.warranty_start.date(), date(2025, 1, 1))
        self.assertEqual(result.warranty_end.date(), date(2026, 1, 1))
        self.assertIn(result.warranty_status, ["active", "expired"])

    def test_no_input_starts_now_with_unknown_status(self):
        now = aware(2025, 6, 15, 10, 30)
        result = calculate({}, now=now)

        self.assertEqual(result.warranty_start, now)
        self.assertIsNone(result.warranty_end)
        self.assertEqual(result.warranty_status, WarrantyStatus.UNKNOWN)

    def test_none_input_behaves_like_empty(self):
        result = calculate(None)
        self.assertIsNotNone(result.warranty_start)
        self.assertEqual(result.warranty_status, "unknown")

    def test_zero_months_has_no_end(self):
        result = calculate({"warranty_start": "2025-03-10", "warranty_months": 0})
        self.assertIsNone(result.warranty_end)
        self.assertEqual(result.warranty_status, "unknown")

    def test_month_overflow_clamps_to_last_day(self):
        """Test 31 de enero + 1 mes = último día de febrero"""
        result = calculate({"warranty_start": "2025-01-31", "warranty_months": 1})
        self.assertEqual(result.warranty_end.date(), date(2025, 2, 28))

        leap = calculate({"warranty_start": "2024-01-31", "warranty_months": 1})
        self.assertEqual(leap.warranty_end.date(), date(2024, 2, 29))

    def test_utc_start_is_advanced_in_local_calendar(self):
        """Test 2025-01-30 21:00 UTC es 31 de enero local: fin el 28 de febrero local"""
        start = datetime(2025, 1, 30, 21, 0, tzinfo=dt_timezone.utc)
        result = calculate({"warranty_start": start, "warranty_months": 1})

        self.assertEqual(result.warranty_start, start)
        self.assertEqual(timezone.localtime(result.warranty_end).date(), date(2025, 2, 28))

    def test_end_is_start_advanced_by_calendar_months(self):
        start = aware(2023, 8, 31, 14, 0)
        for months in (1, 2, 6, 12, 18, 24):
            result = calculate({"warranty_start": start, "warranty_months": months})
            self.assertEqual(result.warranty_end, start + relativedelta(months=months))

    def test_status_active_when_end_in_future(self):
        now = aware(2025, 6, 1)
        result = calculate({"warranty_start": "2025-05-01", "warranty_months": 3}, now=now)
        self.assertEqual(result.warranty_status, "active")

    def test_status_active_on_the_end_instant(self):
        start = aware(2025, 1, 1)
        result = calculate({"warranty_start": start, "warranty_months": 1}, now=aware(2025, 2, 1))
        self.assertEqual(result.warranty_status, "active")

    def test_status_expired_when_end_in_past(self):
        now = aware(2026, 6, 1)
        result = calculate({"warranty_start": "2025-01-01", "warranty_months": 12}, now=now)
        self.assertEqual(result.warranty_status, "expired")

    def test_idempotent_with_frozen_clock(self):
        now = aware(2025, 6, 1)
        data = {"warranty_start": "2025-02-14", "warranty_months": 6}
        self.assertEqual(calculate(data, now=now), calculate(data, now=now))

    def test_months_are_coerced_by_truncation(self):
        self.assertEqual(
            calculate({"warranty_start": "2025-01-01", "warranty_months": "6"}).warranty_end.date(),
            date(2025, 7, 1),
        )
        self.assertEqual(
            calculate({"warranty_start": "2025-01-01", "warranty_months": 2.9}).warranty_end.date(),
            date(2025, 3, 1),
        )

    def test_non_numeric_months_default_to_zero(self):
        result = calculate({"warranty_start": "2025-01-01", "warranty_months": "doce"})
        self.assertIsNone(result.warranty_end)
        self.assertEqual(result.warranty_status, "unknown")

    def test_negative_months_yield_no_end(self):
        result = calculate({"warranty_start": "2025-01-01", "warranty_months": -3})
        self.assertIsNone(result.warranty_end)
        self.assertEqual(result.warranty_status, "unknown")

    def test_date_object_and_naive_datetime_are_made_aware(self):
        from_date = calculate({"warranty_start": date(2025, 4, 1), "warranty_months": 1})
        from_naive = calculate({"warranty_start": datetime(2025, 4, 1), "warranty_months": 1})

        self.assertTrue(timezone.is_aware(from_date.warranty_start))
        self.assertEqual(from_date.warranty_start, from_naive.warranty_start)

    def test_accepts_warranty_input_dataclass(self):
        result = calculate(WarrantyInput(warranty_start="2025-01-01", warranty_months=12))
        self.assertEqual(result.warranty_end.date(), date(2026, 1, 1))

    def test_as_dict_has_the_three_fields(self):
        result = calculate({"warranty_months": 3})
        self.assertEqual(set(result.as_dict()), {"warranty_start", "warranty_end", "warranty_status"})

    def test_is_active(self):
        start, end = aware(2025, 1, 1), aware(2025, 7, 1)
        self.assertTrue(is_active(start, end, now=aware(2025, 3, 1)))
        self.assertFalse(is_active(start, end, now=aware(2025, 8, 1)))
        self.assertFalse(is_active(start, None))
        self.assertFalse(is_active(None, end))


class WarrantyDetailsTest(SimpleTestCase):
    def test_unknown_keys_are_dropped(self):
        details = WarrantyDetails.from_data({"customer_email": "a@b.com", "favourite_colour": "rojo"})
        self.assertEqual(details.as_dict(), {"customer_email": "a@b.com"})

    def test_imei_number_alias(self):
        details = WarrantyDetails.from_data({"imei_number": "356789012345678"})
        self.assertEqual(details.imei, "356789012345678")

    def test_empty_values_are_omitted(self):
        self.assertEqual(WarrantyDetails.from_data(None).as_dict(), {})
        self.assertEqual(WarrantyDetails(color="", storage="128GB").as_dict(), {"storage": "128GB"})


class ComputeAmountsTest(SimpleTestCase):
    def test_total_and_ganji(self):
        amounts = compute_amounts(2, Decimal("500.00"), Decimal("350.00"), Decimal("20.00"))
        self.assertEqual(amounts["total_amount"], Decimal("1000.00"))
        self.assertEqual(amounts["ganji"], Decimal("280.00"))

    def test_without_cost_price_no_ganji(self):
        amounts = compute_amounts(1, Decimal("99.99"))
        self.assertEqual(amounts, {"total_amount": Decimal("99.99")})


class WarrantyToggleTest(TestCase):
    def setUp(self):
        self.now = aware(2025, 6, 1)
        self.sale = Sale.objects.create(
            product_name="tecno spark 20",
            quantity=1,
            unit_price=Decimal("300.00"),
            selling_price=Decimal("300.00"),
            sale_date=self.now,
        )

    def _warrant(self, months=6, start=None):
        start = start or aware(2025, 5, 1)
        result = calculate({"warranty_start": start, "warranty_months": months}, now=self.now)
        Sale.objects.filter(pk=self.sale.pk).update(
            has_warranty=True, warranty_months=months, warranty_details={"imei": "1"}, **result.as_dict()
        )
        self.sale.refresh_from_db()

    def test_create_without_warranty_leaves_fields_empty(self):
        fields = warranty_fields_for_create({"warranty_months": 6}, now=self.now)
        self.assertFalse(fields["has_warranty"])
        self.assertIsNone(fields["warranty_start"])
        self.assertIsNone(fields["warranty_end"])
        self.assertIsNone(fields["warranty_status"])

    def test_create_with_warranty_computes(self):
        fields = warranty_fields_for_create(
            {"has_warranty": True, "warranty_months": 6, "warranty_start": "2025-05-01"}, now=self.now
        )
        self.assertTrue(fields["has_warranty"])
        self.assertEqual(fields["warranty_end"].date(), date(2025, 11, 1))
        self.assertEqual(fields["warranty_status"], "active")
        self.assertEqual(fields["warranty_details"], {})

    def test_update_turning_off_wins_over_months(self):
        self._warrant()
        fields = warranty_fields_for_update(self.sale, {"has_warranty": False, "warranty_months": 12})
        self.assertFalse(fields["has_warranty"])
        self.assertIsNone(fields["warranty_start"])
        self.assertIsNone(fields["warranty_end"])
        self.assertIsNone(fields["warranty_status"])
        self.assertIsNone(fields["warranty_details"])

    def test_update_new_months_recomputes_from_stored_start(self):
        self._warrant(months=6)
        fields = warranty_fields_for_update(self.sale, {"warranty_months": 12}, now=self.now)
        self.assertEqual(fields["warranty_start"], self.sale.warranty_start)
        local_start = timezone.localtime(self.sale.warranty_start)
        self.assertEqual(fields["warranty_end"], local_start + relativedelta(months=12))

    def test_recompute_from_stored_start_clamps_in_local_calendar(self):
        """Test el inicio leído de la base (UTC) se suma en el calendario local"""
        self._warrant(months=1, start=aware(2025, 1, 31))
        self.assertEqual(self.sale.warranty_start.utcoffset(), timedelta(0))

        fields = warranty_fields_for_update(self.sale, {"warranty_months": 1}, now=self.now)

        end = timezone.localtime(fields["warranty_end"])
        self.assertEqual(end.date(), date(2025, 2, 28))
        self.assertEqual(fields["warranty_end"], self.sale.warranty_end)

    def test_update_without_warranty_fields_is_untouched(self):
        self._warrant()
        self.assertEqual(warranty_fields_for_update(self.sale, {"customer_name": "Juma"}), {})

    def test_update_months_on_sale_without_warranty_does_nothing(self):
        self.assertEqual(warranty_fields_for_update(self.sale, {"warranty_months": 6}), {})

    def test_update_turning_on_uses_stored_months(self):
        self.sale.warranty_months = 3
        self.sale.save()
        fields = warranty_fields_for_update(self.sale, {"has_warranty": True}, now=self.now)
        self.assertTrue(fields["has_warranty"])
        self.assertEqual(fields["warranty_start"], self.now)
        self.assertEqual(fields["warranty_end"], self.now + relativedelta(months=3))
        self.assertEqual(fields["warranty_details"], {})


class SaleServiceTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="asha", password="testpass123", first_name="Asha", last_name="Mushi"
        )
        self.base = {
            "product_name": "  Samsung A15 ",
            "quantity": 1,
            "unit_price": Decimal("450.00"),
            "cost_price": Decimal("380.00"),
        }

    def test_create_sale_computes_amounts_and_salesman(self):
        sale = SaleService.create_sale({**self.base, "quantity": 2}, user=self.user)

        self.assertEqual(sale.product_name, "samsung a15")
        self.assertEqual(sale.selling_price, Decimal("450.00"))
        self.assertEqual(sale.total_amount, Decimal("900.00"))
        self.assertEqual(sale.ganji, Decimal("140.00"))
        self.assertEqual(sale.salesman, self.user)
        self.assertEqual(sale.created_by, "asha")
        self.assertFalse(sale.has_warranty)

    def test_create_sale_with_warranty_sends_email_after_commit(self):
        data = {
            **self.base,
            "has_warranty": True,
            "warranty_months": 6,
            "warranty_details": {"customer_email": "cliente@example.com", "imei": "111222333444555"},
        }
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            sale = SaleService.create_sale(data, user=self.user, sender_name="Asha Mushi")

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(sale.warranty_status, "active")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["cliente@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Garantía registrada por Asha Mushi - samsung a15")
        self.assertIn("111222333444555", mail.outbox[0].body)
        self.assertTrue(AuditLog.objects.filter(action="enable_warranty", entity_id=sale.pk).exists())

    def test_create_sale_with_warranty_without_email_sends_nothing(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            sale = SaleService.create_sale(
                {**self.base, "has_warranty": True, "warranty_months": 6}, user=self.user
            )

        self.assertTrue(sale.has_warranty)
        self.assertEqual(len(callbacks), 0)
        self.assertEqual(len(mail.outbox), 0)

    def test_expired_warranty_on_create_is_not_notified(self):
        data = {
            **self.base,
            "has_warranty": True,
            "warranty_months": 1,
            "warranty_start": "2020-01-01",
            "warranty_details": {"customer_email": "cliente@example.com"},
        }
        with self.captureOnCommitCallbacks(execute=True):
            sale = SaleService.create_sale(data, user=self.user)

        self.assertEqual(sale.warranty_status, "expired")
        self.assertEqual(len(mail.outbox), 0)

    def test_email_failure_is_logged_and_sale_is_kept(self):
        data = {
            **self.base,
            "has_warranty": True,
            "warranty_months": 6,
            "warranty_details": {"customer_email": "cliente@example.com"},
        }
        with patch("django.core.mail.EmailMultiAlternatives.send", side_effect=SMTPException("down")):
            with self.assertLogs("shop.core.notifications", level="ERROR") as logs:
                with self.captureOnCommitCallbacks(execute=True):
                    sale = SaleService.create_sale(data, user=self.user)

        self.assertTrue(Sale.objects.filter(pk=sale.pk, has_warranty=True).exists())
        self.assertIn("No se pudo enviar", logs.output[0])

    @override_settings(WARRANTY_NOTIFICATIONS_ENABLED=False)
    def test_notifications_can_be_disabled(self):
        data = {
            **self.base,
            "has_warranty": True,
            "warranty_months": 6,
            "warranty_details": {"customer_email": "cliente@example.com"},
        }
        with self.captureOnCommitCallbacks(execute=True):
            SaleService.create_sale(data, user=self.user)

        self.assertEqual(len(mail.outbox), 0)

    def test_update_turning_warranty_on_notifies_once(self):
        sale = SaleService.create_sale(
            {**self.base, "warranty_details": {"customer_email": "cliente@example.com"}}, user=self.user
        )
        with self.captureOnCommitCallbacks(execute=True):
            sale = SaleService.update_sale(
                sale.pk, {"has_warranty": True, "warranty_months": 12}, user=self.user
            )
        with self.captureOnCommitCallbacks(execute=True):
            SaleService.update_sale(sale.pk, {"warranty_months": 24}, user=self.user)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(
            list(AuditLog.objects.filter(entity_id=sale.pk).order_by("id").values_list("action", flat=True)),
            ["enable_warranty", "recompute_warranty"],
        )

    def test_update_recomputes_totals(self):
        sale = SaleService.create_sale(self.base, user=self.user)
        sale = SaleService.update_sale(sale.pk, {"quantity": 3, "offers": Decimal("10.00")}, user=self.user)

        self.assertEqual(sale.total_amount, Decimal("1350.00"))
        self.assertEqual(sale.ganji, Decimal("200.00"))

    def test_update_ignores_warranty_start_when_sale_has_no_warranty(self):
        sale = SaleService.create_sale(self.base, user=self.user)
        sale = SaleService.update_sale(sale.pk, {"warranty_start": aware(2025, 1, 1)}, user=self.user)

        self.assertFalse(sale.has_warranty)
        self.assertIsNone(sale.warranty_start)

    def test_update_months_keeps_month_end_clamping(self):
        sale = SaleService.create_sale(
            {**self.base, "has_warranty": True, "warranty_months": 1, "warranty_start": date(2025, 1, 31)},
            user=self.user,
        )
        first_end = timezone.localtime(sale.warranty_end)

        sale = SaleService.update_sale(sale.pk, {"warranty_months": 1}, user=self.user)

        self.assertEqual(first_end.date(), date(2025, 2, 28))
        self.assertEqual(timezone.localtime(sale.warranty_end), first_end)

    def test_zero_selling_price_on_update_recomputes_totals(self):
        sale = SaleService.create_sale(
            {**self.base, "quantity": 2, "unit_price": Decimal("100.00"), "cost_price": Decimal("50.00")},
            user=self.user,
        )

        sale = SaleService.update_sale(sale.pk, {"selling_price": Decimal("0")}, user=self.user)

        sale.refresh_from_db()
        self.assertEqual(sale.selling_price, Decimal("0.00"))
        self.assertEqual(sale.total_amount, Decimal("0.00"))
        self.assertEqual(sale.ganji, Decimal("-100.00"))

    def test_zero_selling_price_on_create_is_kept(self):
        sale = SaleService.create_sale({**self.base, "selling_price": Decimal("0")}, user=self.user)

        self.assertEqual(sale.selling_price, Decimal("0"))
        self.assertEqual(sale.total_amount, Decimal("0"))

    def test_delete_sale_is_audited(self):
        sale = SaleService.create_sale(self.base, user=self.user)
        SaleService.delete_sale(sale.pk, user=self.user)

        self.assertFalse(Sale.objects.filter(pk=sale.pk).exists())
        self.assertTrue(AuditLog.objects.filter(action="delete_sale", entity_id=sale.pk).exists())

    def test_display_name(self):
        self.assertEqual(display_name(self.user), "Asha Mushi")
        self.assertEqual(display_name(User(username="juma")), "juma")
        self.assertEqual(display_name(None), "WingaPlus")

    def test_sale_message_prefers_phone_name(self):
        sale = SaleService.create_sale(
            {
                **self.base,
                "phone_name": "Galaxy A15 128GB",
                "has_warranty": True,
                "warranty_months": 6,
                "warranty_details": {"customer_email": "cliente@example.com"},
            },
            user=self.user,
        )
        message = build_sale_warranty_message(sale, "Tienda Kariakoo")
        self.assertEqual(message.subject, "Garantía registrada por Tienda Kariakoo - Galaxy A15 128GB")


class SaleApiTest(APITestCase):
    def setUp(self):
        self.owner = User.objects.create_superuser(
            username="owner", email="owner@example.com", password="adminpass123"
        )
        self.client.force_authenticate(user=self.owner)
        self.payload = {
            "product_name": "Test Phone",
            "quantity": 1,
            "unit_price": "100.00",
            "has_warranty": True,
            "warranty_months": 6,
            "warranty_details": {"imei": "111222333444555"},
        }

    def _create(self, **overrides):
        response = self.client.post(reverse("sales-list"), {**self.payload, **overrides}, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        return response.data["data"]

    def test_create_sale_with_warranty_sets_fields_six_months_apart(self):
        data = self._create()

        self.assertTrue(data["has_warranty"])
        self.assertEqual(data["warranty_status"], "active")
        start = parse_datetime(data["warranty_start"])
        end = parse_datetime(data["warranty_end"])
        self.assertIsNotNone(start)
        self.assertEqual(end, start + relativedelta(months=6))
        self.assertEqual(data["warranty_details"]["imei"], "111222333444555")
        self.assertEqual(data["product_name"], "test phone")

    def test_update_turning_off_warranty_clears_fields(self):
        sale_id = self._create()["id"]

        response = self.client.put(
            reverse("sales-detail", args=[sale_id]), {"has_warranty": False}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        data = response.data["data"]
        self.assertFalse(data["has_warranty"])
        self.assertIsNone(data["warranty_start"])
        self.assertIsNone(data["warranty_end"])
        self.assertIsNone(data["warranty_status"])

    def test_update_turning_off_ignores_months_in_same_request(self):
        sale_id = self._create()["id"]

        response = self.client.patch(
            reverse("sales-detail", args=[sale_id]),
            {"has_warranty": False, "warranty_months": 12},
            format="json",
        )

        sale = Sale.objects.get(pk=sale_id)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(sale.has_warranty)
        self.assertIsNone(sale.warranty_end)
        self.assertEqual(sale.warranty_months, 12)

    def test_update_new_months_recomputes_without_reset(self):
        created = self._create(warranty_start="2025-01-01")

        response = self.client.patch(
            reverse("sales-detail", args=[created["id"]]), {"warranty_months": 12}, format="json"
        )

        data = response.data["data"]
        self.assertEqual(parse_datetime(data["warranty_start"]).date(), date(2025, 1, 1))
        self.assertEqual(parse_datetime(data["warranty_end"]).date(), date(2026, 1, 1))

    def test_update_other_fields_leaves_warranty_untouched(self):
        created = self._create()

        response = self.client.patch(
            reverse("sales-detail", args=[created["id"]]), {"customer_name": "Neema"}, format="json"
        )

        data = response.data["data"]
        self.assertEqual(data["customer_name"], "Neema")
        self.assertEqual(data["warranty_start"], created["warranty_start"])
        self.assertEqual(data["warranty_end"], created["warranty_end"])

    def test_create_without_warranty(self):
        data = self._create(has_warranty=False)

        self.assertFalse(data["has_warranty"])
        self.assertIsNone(data["warranty_start"])
        self.assertIsNone(data["warranty_end"])
        self.assertIsNone(data["warranty_status"])

    def test_create_requires_product(self):
        payload = {"quantity": 1, "unit_price": "100.00"}
        response = self.client.post(reverse("sales-list"), payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertIsInstance(response.data["errors"], list)

    def test_invalid_warranty_start_is_rejected_without_write(self):
        response = self.client.post(
            reverse("sales-list"), {**self.payload, "warranty_start": "no-es-fecha"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertTrue(any("warranty_start" in error for error in response.data["errors"]))
        self.assertEqual(Sale.objects.count(), 0)

    def test_negative_months_are_rejected(self):
        response = self.client.post(reverse("sales-list"), {**self.payload, "warranty_months": -1}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Sale.objects.count(), 0)

    def test_invalid_customer_email_is_rejected(self):
        response = self.client.post(
            reverse("sales-list"),
            {**self.payload, "warranty_details": {"customer_email": "no-email"}},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertTrue(any("warranty_details.customer_email" in error for error in response.data["errors"]))

    def test_create_with_product_reference(self):
        product = Product.objects.create(name="Infinix Hot 40", category="phones", selling_price=Decimal("320.00"))

        response = self.client.post(
            reverse("sales-list"),
            {"product_id": product.pk, "quantity": 1, "unit_price": "320.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["product_name"], "infinix hot 40")
        self.assertEqual(response.data["data"]["category"], "phones")

    def test_list_filters_by_date_range(self):
        self._create(sale_date="2025-01-10")
        self._create(sale_date="2025-03-10")

        response = self.client.get(reverse("sales-list"), {"date_from": "2025-02-01"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)

    def test_warranty_status_endpoint(self):
        created = self._create(warranty_start="2020-01-01")

        response = self.client.get(reverse("sales-warranty", args=[created["id"]]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["current_status"], "expired")
        self.assertFalse(response.data["is_active"])
        self.assertEqual(response.data["days_remaining"], 0)

    def test_resend_warranty_without_warranty_returns_error_contract(self):
        created = self._create(has_warranty=False)

        response = self.client.post(reverse("sales-resend-warranty", args=[created["id"]]))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "SALE_WITHOUT_WARRANTY")

    def test_resend_warranty_sends_email(self):
        created = self._create(warranty_details={"customer_email": "cliente@example.com"})
        mail.outbox.clear()

        response = self.client.post(reverse("sales-resend-warranty", args=[created["id"]]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["code"], "WARRANTY_EMAIL_SENT")
        self.assertEqual(len(mail.outbox), 1)

    def test_delete_sale(self):
        created = self._create()

        response = self.client.delete(reverse("sales-detail", args=[created["id"]]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["code"], "SALE_DELETED")
        self.assertFalse(Sale.objects.exists())

    def test_unauthenticated_request_is_rejected(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse("sales-list"))
        self.assertEqual(response.status_code, 401)


class SalesmanAccessTest(APITestCase):
    def setUp(self):
        group = Group.objects.create(name=GROUP_SALESMEN)
        self.salesman = User.objects.create_user(username="baraka", password="testpass123")
        self.salesman.groups.add(group)
        self.other = User.objects.create_user(username="neema", password="testpass123")
        self.other.groups.add(group)
        self.other_sale = Sale.objects.create(
            product_name="itel a70",
            unit_price=Decimal("150.00"),
            selling_price=Decimal("150.00"),
            sale_date=timezone.now(),
            salesman=self.other,
        )
        self.client.force_authenticate(user=self.salesman)

    def test_salesman_only_sees_own_sales(self):
        self.client.post(
            reverse("sales-list"),
            {"product_name": "itel p55", "quantity": 1, "unit_price": "200.00"},
            format="json",
        )

        response = self.client.get(reverse("sales-list"))

        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["salesman_id"], self.salesman.pk)

    def test_salesman_cannot_update_other_sale(self):
        response = self.client.patch(
            reverse("sales-detail", args=[self.other_sale.pk]), {"has_warranty": False}, format="json"
        )
        self.assertEqual(response.status_code, 404)

    def test_salesman_cannot_open_dashboard(self):
        response = self.client.get(reverse("dashboard-overview"))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["code"], "PERMISSION_DENIED")

    def test_user_without_role_cannot_sell(self):
        self.client.force_authenticate(user=User.objects.create_user(username="guest", password="x"))
        response = self.client.get(reverse("sales-list"))
        self.assertEqual(response.status_code, 403)


class WarrantyApiTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_superuser(
            username="kariakoo", email="shop@example.com", password="adminpass123", first_name="Kariakoo"
        )
        self.client.force_authenticate(user=self.user)
        self.payload = {
            "phone_name": "iPhone 13",
            "customer_name": "Juma Hassan",
            "customer_email": "juma@example.com",
            "customer_phone": "+255700000000",
            "store_name": "Kariakoo Phones",
            "color": "Negro",
            "storage": "128GB",
            "price": "1500000.00",
            "imei_number": "356789012345678",
            "warranty_period": 12,
        }

    def test_file_warranty_sends_confirmation(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse("warranties-list"), self.payload, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["code"], "WARRANTY_FILED")
        warranty = response.data["warranty"]
        self.assertEqual(warranty["status"], "active")
        self.assertEqual(warranty["stored_status"], "active")
        created_at = Warranty.objects.get(pk=warranty["id"]).created_at
        expected_expiry = (timezone.localtime(created_at) + relativedelta(months=12)).date().isoformat()
        self.assertEqual(warranty["expiry_date"], expected_expiry)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["juma@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Garantía registrada por Kariakoo - iPhone 13")

    def test_file_warranty_requires_all_fields(self):
        payload = dict(self.payload)
        del payload["customer_email"]

        response = self.client.post(reverse("warranties-list"), payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")
        self.assertFalse(Warranty.objects.exists())

    def test_list_includes_calculated_status(self):
        old = Warranty.objects.create(**{**self.payload, "price": Decimal("100.00"), "warranty_period": 1})
        Warranty.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=90))

        response = self.client.get(reverse("warranties-list"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["results"][0]["status"], "expired")

    def test_expiry_date_near_month_end_uses_local_calendar(self):
        warranty = Warranty.objects.create(**{**self.payload, "price": Decimal("100.00"), "warranty_period": 1})
        Warranty.objects.filter(pk=warranty.pk).update(created_at=aware(2025, 1, 31, 1, 0))
        warranty.refresh_from_db()

        self.assertEqual(warranty.created_at.utcoffset(), timedelta(0))
        self.assertEqual(warranty.expiry_date, date(2025, 2, 28))

    def test_status_and_expiry_come_from_one_calculation(self):
        warranty = Warranty.objects.create(**{**self.payload, "price": Decimal("100.00")})
        original = Warranty.warranty_result

        with patch.object(Warranty, "warranty_result", autospec=True, side_effect=original) as mocked:
            data = WarrantyReadSerializer(warranty).data

        self.assertEqual(mocked.call_count, 1)
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["expiry_date"], warranty.expiry_date.isoformat())

    def test_resend(self):
        warranty = Warranty.objects.create(**{**self.payload, "price": Decimal("100.00")})

        response = self.client.post(reverse("warranties-resend", args=[warranty.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)

    def test_resend_failure_returns_conflict(self):
        warranty = Warranty.objects.create(**{**self.payload, "price": Decimal("100.00")})

        with patch("django.core.mail.EmailMultiAlternatives.send", side_effect=SMTPException("down")):
            response = self.client.post(reverse("warranties-resend", args=[warranty.pk]))

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["code"], "WARRANTY_EMAIL_NOT_SENT")

    def test_turning_off_sale_warranty_keeps_filed_warranty(self):
        warranty = WarrantyService.file_warranty(
            {**self.payload, "price": Decimal("100.00")}, user=self.user
        )
        sale = SaleService.create_sale(
            {
                "product_name": "iphone 13",
                "quantity": 1,
                "unit_price": Decimal("100.00"),
                "warranty": warranty,
                "has_warranty": True,
                "warranty_months": 12,
            },
            user=self.user,
        )

        SaleService.update_sale(sale.pk, {"has_warranty": False}, user=self.user)

        sale.refresh_from_db()
        self.assertEqual(sale.warranty_id, warranty.pk)
        self.assertTrue(Warranty.objects.filter(pk=warranty.pk).exists())


class ProductApiTest(APITestCase):
    def setUp(self):
        self.owner = User.objects.create_superuser(username="owner", email="o@example.com", password="x")
        self.client.force_authenticate(user=self.owner)

    def test_names_are_normalized_and_unique_per_category(self):
        first = self.client.post(
            reverse("products-list"),
            {"name": "iPhone 13", "category": "phones", "selling_price": "900.00"},
            format="json",
        )
        duplicate = self.client.post(
            reverse("products-list"),
            {"name": "IPHONE 13 ", "category": "phones"},
            format="json",
        )

        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.data["name"], "iphone 13")
        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.data["code"], "VALIDATION_ERROR")

    def test_delete_deactivates(self):
        product = Product.objects.create(name="cargador usb-c", category="accessories")

        response = self.client.delete(reverse("products-detail", args=[product.pk]))

        product.refresh_from_db()
        self.assertEqual(response.status_code, 204)
        self.assertFalse(product.active)


class WarrantyCommandsTest(TestCase):
    def setUp(self):
        self.now = timezone.now()
        self.stale = Sale.objects.create(
            product_name="nokia c32",
            unit_price=Decimal("100.00"),
            selling_price=Decimal("100.00"),
            sale_date=self.now - timedelta(days=400),
            has_warranty=True,
            warranty_months=12,
            warranty_start=self.now - timedelta(days=400),
            warranty_end=self.now - timedelta(days=35),
            warranty_status=WarrantyStatus.ACTIVE,
        )
        self.current = Sale.objects.create(
            product_name="nokia g42",
            unit_price=Decimal("100.00"),
            selling_price=Decimal("100.00"),
            sale_date=self.now,
            has_warranty=True,
            warranty_months=12,
            warranty_start=self.now,
            warranty_end=self.now + timedelta(days=365),
            warranty_status=WarrantyStatus.ACTIVE,
        )

    def test_refresh_marks_expired_sales(self):
        call_command("refresh_warranty_statuses")

        self.stale.refresh_from_db()
        self.current.refresh_from_db()
        self.assertEqual(self.stale.warranty_status, "expired")
        self.assertEqual(self.current.warranty_status, "active")

    def test_refresh_dry_run_does_not_persist(self):
        summary = refresh_warranty_statuses(dry_run=True)

        self.stale.refresh_from_db()
        self.assertEqual(summary["sales"], 1)
        self.assertEqual(self.stale.warranty_status, "active")

    def test_resend_warranty_emails_command(self):
        Warranty.objects.create(
            phone_name="Redmi 13C",
            customer_name="Amina",
            customer_email="amina@example.com",
            customer_phone="+255711111111",
            store_name="Mlimani",
            color="Azul",
            storage="256GB",
            price=Decimal("400000.00"),
            imei_number="861234567890123",
            warranty_period=6,
        )

        call_command("resend_warranty_emails", sender="Mlimani Phones", stdout=StringIO())

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Garantía registrada por Mlimani Phones - Redmi 13C")

    def test_setup_permissions_creates_roles(self):
        call_command("setup_permissions", stdout=StringIO())

        salesmen = Group.objects.get(name=GROUP_SALESMEN)
        self.assertTrue(salesmen.permissions.filter(codename="add_sale").exists())


class ReportsApiTest(APITestCase):
    def setUp(self):
        self.owner = User.objects.create_superuser(username="owner", email="o@example.com", password="x")
        self.client.force_authenticate(user=self.owner)
        SaleService.create_sale(
            {
                "product_name": "tecno camon 30",
                "quantity": 2,
                "unit_price": Decimal("500.00"),
                "cost_price": Decimal("400.00"),
                "has_warranty": True,
                "warranty_months": 6,
            },
            user=self.owner,
        )

    def test_dashboard_overview(self):
        response = self.client.get(reverse("dashboard-overview"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["code"], "DASHBOARD_OVERVIEW")
        self.assertEqual(response.data["sales"]["all_time"]["count"], 1)
        self.assertEqual(response.data["sales"]["all_time"]["ganji"], Decimal("200.00"))
        self.assertEqual(response.data["sale_warranties"]["active"], 1)

    def test_export_sales_csv(self):
        response = self.client.get(reverse("export-sales"), {"file_format": "csv"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/csv")
        content = response.content.decode("utf-8-sig")
        self.assertIn("ID Venta", content)
        self.assertIn("tecno camon 30", content)

    def test_export_warranties_excel(self):
        response = self.client.get(reverse("export-warranties"), {"file_format": "excel"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("spreadsheetml", response["Content-Type"])
