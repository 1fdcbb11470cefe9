import pytest
from apxguard.core.models import ContextFrame, FrameRole, ParserState, RotationEntry
from apxguard.extraction.context import ContextStack
from apxguard.extraction.router import FieldRouter, parse_number


# --- Context stack ---

def test_dedent_pops_equal_and_deeper_frames():
    stack = ContextStack()
    stack.open_mapping("spec", 0)
    stack.open_mapping("required_env", 2)
    stack.open_item(4)

    stack.dedent(2)
    assert stack.path == ["spec"]


def test_sibling_at_same_depth_closes_previous():
    stack = ContextStack()
    stack.open_mapping("pack", 0)
    stack.dedent(0)
    stack.open_mapping("spec", 0)

    assert stack.path == ["spec"]


@pytest.mark.parametrize("parent, name, role", [
    ("required_env", "required_env-item", FrameRole.ENV_ITEM),
    ("rotations", "rotations-item", FrameRole.ROTATION_ITEM),
    ("containers", "containers-item", FrameRole.GENERIC),
])
def test_item_role_follows_parent_name(parent, name, role):
    stack = ContextStack()
    stack.open_mapping(parent, 0)
    frame = stack.open_item(2)

    assert frame.name == name
    assert frame.role is role
    assert (frame.rotation is not None) == (role is FrameRole.ROTATION_ITEM)


def test_item_without_parent():
    frame = ContextStack().open_item(0)
    assert frame.name == "list-item"
    assert frame.role is FrameRole.GENERIC


def test_each_rotation_item_gets_fresh_entry():
    stack = ContextStack()
    stack.open_mapping("rotations", 0)
    first = stack.open_item(2)
    stack.dedent(2)
    second = stack.open_item(2)

    assert first.rotation is not second.rotation


# --- Field router ---

def test_identity_requires_open_block():
    state = ParserState()
    router = FieldRouter()

    router.route(state, "id", "stray", ["spec"], None)
    assert state.pack_id is None

    router.route(state, "id", "demo", ["pack"], None)
    router.route(state, "namespace", "core", ["spec", "required_env"], None)
    assert state.pack_id == "demo"
    assert state.namespace == "core"


def test_identity_first_write_wins():
    state = ParserState()
    router = FieldRouter()
    router.route(state, "version", "1.0.0", ["pack"], None)
    router.route(state, "version", "2.0.0", ["pack"], None)

    assert state.pack_version == "1.0.0"


@pytest.mark.parametrize("value, missing", [
    ("false", 1),
    ("FALSE", 1),
    ("'false'", 1),
    ("true", 0),
    ("no", 0),
])
def test_present_false_counts_missing_env(value, missing):
    state = ParserState()
    frame = ContextFrame(name="required_env-item", indent=4, role=FrameRole.ENV_ITEM)
    FieldRouter().route(state, "present", value, ["spec", "required_env", "required_env-item"], frame)

    assert state.missing_env == missing


def test_present_outside_env_item_is_ignored():
    state = ParserState()
    frame = ContextFrame(name="other-item", indent=4)
    FieldRouter().route(state, "present", "false", ["other", "other-item"], frame)

    assert state.missing_env == 0


def test_rotation_fields_update_acting_entry():
    entry = RotationEntry()
    frame = ContextFrame(name="rotations-item", indent=4, role=FrameRole.ROTATION_ITEM, rotation=entry)
    router = FieldRouter()
    router.route(ParserState(), "last_rotated_days", "120", ["rotations-item"], frame)
    router.route(ParserState(), "max_days", "soon", ["rotations-item"], frame)

    assert entry.last_rotated_days == 120
    assert entry.max_days is None
    assert entry.is_stale is False


@pytest.mark.parametrize("raw, expected", [
    ("90", 90.0),
    (" 7.5 ", 7.5),
    ("-3", -3.0),
    ("", None),
    ("ninety", None),
    ("nan", None),
    ("inf", None),
])
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected
