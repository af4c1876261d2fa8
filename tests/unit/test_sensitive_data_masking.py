import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_email_masked(self):
        event_dict = {"event": "test", "customer_email": "john.doe@example.com"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "john.doe@example.com" not in result["customer_email"]
        assert "***MASKED***" in result["customer_email"]

    def test_email_inside_sentence_masked(self):
        event_dict = {"event": "Order created for jane+shop@mail.example.org today"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["event"] == "Order created for ***MASKED*** today"

    def test_password_masked(self):
        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_authorization_masked_case_insensitive(self):
        event_dict = {"event": "test", "header": "Authorization: Bearer-xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "Bearer-xyz" not in result["header"]

    def test_non_string_values_untouched(self):
        event_dict = {"event": "test", "item_count": 3, "total": None}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["item_count"] == 3
        assert result["total"] is None

    def test_non_sensitive_data_unchanged(self):
        event_dict = {
            "event": "order.operation_applied",
            "order_id": "0190a1b2-0000-7000-8000-000000000000",
            "tracking_number": "TRK123456789",
        }
        expected = dict(event_dict)
        result = mask_sensitive_data(None, None, event_dict)
        assert result == expected
