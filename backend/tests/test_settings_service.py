# Overview: Pytest coverage for company settings load/save.

from decimal import Decimal

import pytest

from conftest import auth_headers
from billcraft.services import settings_service
from billcraft.services.settings_service import CompanySettingsConfig, DEFAULT_COMPANY_SETTINGS
from billcraft.storage import StorageError, build_storage
from billcraft.storage.memory_store import MemoryTableStore
from billcraft.validation import ValidationError


class UnreachableSettings(MemoryTableStore):
    def find(self, owner_id, **filters):
        raise StorageError("timeout")


class TestCompanySettingsConfig:
    def test_defaults_when_absent(self):
        config = CompanySettingsConfig.from_record(None)

        assert config.company_name == "My Company"
        assert config.company_address == "Your Business Address"
        assert config.currency == "₹"
        assert config.invoice_prefix == "INV"
        assert config.tax_rate == Decimal("18")
        assert config.gst_rate == Decimal("18")

    def test_blank_stored_text_falls_back(self):
        config = CompanySettingsConfig.from_record({"company_name": "  ", "company_phone": "080-1234"})

        assert config.company_name == "My Company"
        assert config.company_phone == "080-1234"

    def test_company_snapshot_fields(self):
        snapshot = CompanySettingsConfig.defaults().company_snapshot()
        assert set(snapshot) == {"company_name", "company_address", "company_phone", "company_email", "company_gst"}


class TestLoadAndSave:
    def test_load_without_row_returns_defaults(self, storage, user_a):
        config = settings_service.load_company_settings(user_a.id, storage)
        assert config == CompanySettingsConfig.defaults()

    def test_save_creates_then_updates_single_row(self, storage, user_a):
        settings_service.save_company_settings(user_a.id, {"company_name": "Acme"}, storage)
        config = settings_service.save_company_settings(user_a.id, {"gst_rate": "12.5"}, storage)

        assert len(storage.settings.find(user_a.id)) == 1
        assert config.company_name == "Acme"
        assert config.gst_rate == Decimal("12.50")
        assert settings_service.load_company_settings(user_a.id, storage) == config

    @pytest.mark.parametrize("payload", [
        {"gst_rate": 101},
        {"tax_rate": -1},
        {"invoice_prefix": "  "},
        {"currency": ""},
        {"logo": "x"},
    ])
    def test_save_rejects_bad_values(self, storage, user_a, payload):
        with pytest.raises(ValidationError):
            settings_service.save_company_settings(user_a.id, payload, storage)
        assert storage.settings.find(user_a.id) == []

    def test_storage_failure_degrades_to_defaults(self, app):
        storage = build_storage("memory")
        storage.settings = UnreachableSettings()

        config = settings_service.load_company_settings(1, storage)

        assert config.to_dict() == DEFAULT_COMPANY_SETTINGS


class TestSettingsApi:
    def test_get_and_put(self, client, token_a):
        headers = auth_headers(token_a)

        initial = client.get("/api/settings/company", headers=headers).get_json()
        assert initial["company_name"] == "My Company"
        assert initial["gst_rate"] == "18"

        response = client.put("/api/settings/company", json={
            "company_name": "Acme Stores",
            "currency": "$",
            "invoice_prefix": "AC",
        }, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["invoice_prefix"] == "AC"

        again = client.get("/api/settings/company", headers=headers).get_json()
        assert again["company_name"] == "Acme Stores"
        assert again["currency"] == "$"

    def test_put_rejects_out_of_range_rate(self, client, token_a):
        response = client.put("/api/settings/company", json={"gst_rate": 150}, headers=auth_headers(token_a))
        assert response.status_code == 400
