"""Profile form validation, unit conversion and saving."""
from datetime import datetime

import pytest

from medifast.core import keys
from medifast.core.models import UserProfile
from medifast.core.status import BMICategory, NotifyKind, UnitSystem
from medifast.tools.profile_tools.profile import ProfileForm, ProfileService, format_measurement
from medifast.utils.custom_exception import ValidationError


def valid_form(**overrides):
    values = dict(given_name="Ada", family_name="Lovelace", email="ada@example.com",
                  weight="60", height="165")
    values.update(overrides)
    return ProfileForm(**values)


@pytest.mark.parametrize("overrides, message", [
    ({"given_name": "  "}, "First name is required."),
    ({"family_name": ""}, "Last name is required."),
    ({"email": ""}, "Email is required."),
    ({"email": "ada@example"}, "Enter a valid email address."),
    ({"weight": ""}, "Weight is required."),
    ({"weight": "abc"}, "Weight must be a positive number."),
    ({"height": "-3"}, "Height must be a positive number."),
])
def test_validation_messages(overrides, message):
    assert valid_form(**overrides).validation_message == message


def test_build_profile_in_canonical_units():
    profile = valid_form(weight="60,5").build_profile(now=datetime(2024, 1, 1))
    assert profile.weight_kg == pytest.approx(60.5)
    assert profile.height_cm == 165
    assert profile.full_name == "Ada Lovelace"
    assert profile.initials == "AL"


def test_imperial_input_is_converted():
    form = valid_form(weight="150", height="70", unit_system=UnitSystem.IMPERIAL)
    profile = form.build_profile()
    assert profile.weight_kg == pytest.approx(150 * 0.45359237)
    assert profile.height_cm == pytest.approx(177.8)
    assert profile.weight_in(UnitSystem.IMPERIAL) == pytest.approx(150)


def test_switching_units_converts_typed_values():
    form = valid_form(weight="100", height="254")
    form.update_unit_system(UnitSystem.IMPERIAL)
    assert form.height == "100"
    assert form.weight == "220.5"
    assert form.unit_system is UnitSystem.IMPERIAL


def test_format_measurement():
    assert format_measurement(72.0) == "72"
    assert format_measurement(180.34) == "180.3"


@pytest.mark.parametrize("weight, category", [
    (50, BMICategory.UNDERWEIGHT),
    (70, BMICategory.NORMAL),
    (85, BMICategory.OVERWEIGHT),
    (100, BMICategory.OBESE),
])
def test_bmi_category(weight, category):
    profile = UserProfile(weight_kg=weight, height_cm=180)
    assert profile.bmi_category is category


def test_bmi_missing_without_height():
    assert UserProfile(weight_kg=70).bmi is None


def test_service_saves_and_reloads(store, cues):
    service = ProfileService(store, cues)
    ok, message = service.save(valid_form())
    assert ok and message == "Profile updated"
    assert store.load(keys.USER_PROFILE)["email"] == "ada@example.com"
    assert cues.named("notify") == [NotifyKind.SUCCESS]

    reloaded = ProfileService(store, cues)
    assert reloaded.profile.id == service.profile.id
    assert reloaded.form().weight == "60"


def test_service_rejects_invalid_form(store, cues):
    service = ProfileService(store, cues)
    ok, message = service.save(valid_form(email="nope"))
    assert not ok
    assert message == "Enter a valid email address."
    assert store.load(keys.USER_PROFILE) is None
    assert cues.named("notify") == [NotifyKind.ERROR]


def test_service_tolerates_store_failures(failing_store, broken_cues):
    service = ProfileService(failing_store, broken_cues)
    ok, _ = service.save(valid_form())
    assert ok
    assert service.profile.given_name == "Ada"


def test_validation_error_carries_field():
    with pytest.raises(ValidationError) as info:
        valid_form(height="").build_profile()
    assert info.value.field == "height"
