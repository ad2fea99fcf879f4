from form_config import (
    SERVICE_CATALOG,
    get_service_definition,
    list_services,
    recharge_number_label,
    service_display_name,
)


def test_catalog_has_eight_services():
    assert len(list_services()) == 8
    assert set(SERVICE_CATALOG) == {
        "pan", "aadhar", "scholarship", "caste", "domicile", "ladkiBahin", "govtExam", "recharge",
    }


def test_only_recharge_has_options():
    assert [s.key for s in list_services() if s.is_recharge] == ["recharge"]
    assert len(get_service_definition("recharge").recharge_options) == 6


def test_document_services_have_checklists():
    for service in list_services():
        if not service.is_recharge:
            assert service.documents, service.key


def test_display_name_falls_back_to_key():
    assert service_display_name("ladkiBahin") == get_service_definition("ladkiBahin").name
    assert service_display_name("passport") == "passport"
    assert get_service_definition("passport") is None


def test_recharge_number_label():
    assert recharge_number_label("Mobile Recharge") == "Mobile Number"
    assert recharge_number_label("DTH Recharge") == "Subscriber ID"
    assert recharge_number_label("Electricity Bill") == "Account Number"
