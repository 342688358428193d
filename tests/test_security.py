import pytest

from movieclub.schemas.entry import EntryUpdate
from movieclub.services.entry_service import ClearPicker, KeepPicker, SetPicker
from movieclub.utils.security import constant_time_equals, safe_redirect


def test_constant_time_equals():
    assert constant_time_equals("token", "token")
    assert not constant_time_equals("token", "other")
    assert not constant_time_equals("", "token")
    assert not constant_time_equals(None, "token")
    assert not constant_time_equals("token", "")


@pytest.mark.parametrize("target, expected", [
    ("/groups/3", "/groups/3"),
    ("/", "/"),
    (None, "/"),
    ("", "/"),
    ("https://evil.example", "/"),
    ("//evil.example/path", "/"),
    ("/\\evil.example", "/"),
    ("groups/3", "/"),
])
def test_safe_redirect(target, expected):
    assert safe_redirect(target) == expected


# ============================================
# Entry update input
# ============================================

def test_picker_omitted_keeps():
    assert isinstance(EntryUpdate().picker_change(), KeepPicker)


@pytest.mark.parametrize("value", ["", None])
def test_picker_empty_clears(value):
    assert isinstance(EntryUpdate(picked_by_person_id=value).picker_change(), ClearPicker)


def test_picker_id_sets():
    change = EntryUpdate(picked_by_person_id="9b2f6c36-8a0e-4a55-9d57-5d7cb0fc0a11").picker_change()
    assert isinstance(change, SetPicker)
    assert str(change.person_id) == "9b2f6c36-8a0e-4a55-9d57-5d7cb0fc0a11"


def test_picker_invalid_id_rejected():
    with pytest.raises(ValueError):
        EntryUpdate(picked_by_person_id="not-a-uuid")


@pytest.mark.parametrize("notes", [
    "Tom & Jerry <3",
    "Jonas = picked this one",
    "<b>not markup</b>",
])
def test_notes_kept_verbatim(notes):
    assert EntryUpdate(notes=notes).notes == notes


def test_notes_are_stripped():
    assert EntryUpdate(notes="  late show \n").notes == "late show"
