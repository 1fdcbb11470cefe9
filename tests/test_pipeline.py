import pytest
from apxguard.extraction.pipeline import GuardPipeline, summarize_file

DEMO_SPEC = (
    "kind: config_guard_spec\n"
    "pack:\n"
    "  id: demo\n"
    "  version: 1.0.0\n"
    "spec:\n"
    "  namespace: core\n"
    "  environment: prod\n"
    "  required_env:\n"
    "    - name: API_KEY\n"
    "      present: false\n"
    "  rotations:\n"
    "    - last_rotated_days: 120\n"
    "      max_days: 90\n"
)


def test_demo_pack_summary(tmp_path):
    path = tmp_path / "demo.yaml"
    path.write_text(DEMO_SPEC)

    summary = summarize_file(path)

    assert summary.id == "demo"
    assert summary.version == "1.0.0"
    assert summary.namespace == "core"
    assert summary.environment == "prod"
    assert summary.env_count == 1
    assert summary.missing_env == 1
    assert summary.secrets_count == 1
    assert summary.stale_secrets == 1


def test_rotation_within_window_is_not_stale():
    summary = GuardPipeline().run(DEMO_SPEC.replace("max_days: 90", "max_days: 180"), "demo.yaml")
    assert summary.stale_secrets == 0
    assert summary.secrets_count == 1


@pytest.mark.parametrize("text", [
    DEMO_SPEC.replace("config_guard_spec", "deployment"),
    DEMO_SPEC.replace("config_guard_spec", "config_guard_specification"),
    "",
    "config-guard-spec: true\n",
])
def test_files_without_marker_are_rejected(text):
    assert GuardPipeline().run(text, "pack.yaml") is None


def test_marker_may_appear_in_a_comment():
    summary = GuardPipeline().run("# config_guard_spec\npack:\n  id: x\n", "x.yaml")
    assert summary.id == "x"


@pytest.mark.parametrize("name, expected", [
    ("payments.yaml", "payments"),
    ("payments.YML", "payments"),
    ("pack.yaml", "pack"),
    ("notes.txt", "notes.txt"),
])
def test_identity_falls_back_to_filename(name, expected):
    summary = GuardPipeline().run("# config_guard_spec\nspec:\n  namespace: ns\n", name)

    assert summary.id == expected
    assert summary.version == "0.0.0"
    assert summary.namespace == "ns"
    assert summary.environment is None


def test_multiple_env_and_rotation_items():
    text = (
        "config_guard_spec: 1\n"
        "spec:\n"
        "  required_env:\n"
        "    - name: A\n"
        "      present: true\n"
        "    - name: B\n"
        "      present: False\n"
        "    - present: false\n"
        "  rotations:\n"
        "    - name: db\n"
        "      last_rotated_days: 10\n"
        "      max_days: 30\n"
        "    - name: api\n"
        "      last_rotated_days: 45\n"
        "      max_days: 30\n"
        "    - name: legacy\n"
        "      last_rotated_days: unknown\n"
        "      max_days: 1\n"
    )
    summary = GuardPipeline().run(text, "multi.yaml")

    assert (summary.env_count, summary.missing_env) == (3, 2)
    assert (summary.secrets_count, summary.stale_secrets) == (3, 1)


def test_identity_first_pack_block_wins():
    text = (
        "config_guard_spec: 1\n"
        "pack:\n"
        "  id: first\n"
        "  version: 1.0.0\n"
        "pack:\n"
        "  id: second\n"
        "  version: 2.0.0\n"
    )
    summary = GuardPipeline().run(text, "dup.yaml")
    assert (summary.id, summary.version) == ("first", "1.0.0")


def test_identity_outside_pack_block_is_ignored():
    text = "config_guard_spec: 1\nid: top-level\nmeta:\n  version: 9\n"
    summary = GuardPipeline().run(text, "loose.yaml")
    assert (summary.id, summary.version) == ("loose", "0.0.0")


def test_list_flush_with_its_key_is_not_an_env_item():
    """
    DEDENT RULE: an item at the same indentation as 'required_env:'
    closes that frame before opening, so it is attributed to 'spec'.
    """
    text = (
        "config_guard_spec: 1\n"
        "spec:\n"
        "  required_env:\n"
        "  - name: A\n"
        "    present: false\n"
    )
    summary = GuardPipeline().run(text, "flush.yaml")
    assert (summary.env_count, summary.missing_env) == (0, 0)


def test_malformed_lines_are_forgiven():
    text = (
        "config_guard_spec\n"
        "pack:\n"
        "  just some words\n"
        "  -\n"
        "  id: tolerant\n"
        "spec:\n"
        "  rotations:\n"
        "    - \n"
        "    - last_rotated_days: 5\n"
    )
    summary = GuardPipeline().run(text, "broken.yaml")

    assert summary.id == "tolerant"
    assert summary.secrets_count == 1
    assert summary.stale_secrets == 0


def test_inline_item_pair_and_nested_pair_share_entry():
    text = (
        "config_guard_spec: 1\n"
        "rotations:\n"
        "  - max_days: 30\n"
        "    last_rotated_days: 31\n"
    )
    assert GuardPipeline().run(text, "r.yaml").stale_secrets == 1


def test_counts_are_bounded():
    summary = GuardPipeline().run(DEMO_SPEC, "demo.yaml")
    assert summary.env_count >= summary.missing_env >= 0
    assert summary.secrets_count >= summary.stale_secrets >= 0


def test_unreadable_file_yields_nothing(tmp_path):
    assert summarize_file(tmp_path / "missing.yaml") is None
    assert summarize_file(tmp_path) is None
