from nodepatch.core.selector import LabelSelector, Requirement, selector_matches, selector_violations


def test_missing_selector_never_matches():
    assert selector_matches({"type": "special"}, None) is False
    assert selector_matches({}, None) is False


def test_empty_selector_matches_everything():
    assert selector_matches({"type": "special"}, LabelSelector()) is True
    assert selector_matches({}, LabelSelector()) is True


def test_match_labels_require_exact_values():
    sel = LabelSelector(match_labels={"type": "special", "env": "prod"})
    assert selector_matches({"type": "special", "env": "prod", "zone": "a"}, sel)
    assert not selector_matches({"type": "special"}, sel)
    assert not selector_matches({"type": "special", "env": "dev"}, sel)


def test_set_based_requirements():
    in_sel = LabelSelector(match_expressions=(Requirement("disk-type", "In", ("ssd", "nvme")),))
    assert selector_matches({"disk-type": "nvme"}, in_sel)
    assert not selector_matches({"disk-type": "hdd"}, in_sel)
    assert not selector_matches({}, in_sel)

    not_in = LabelSelector(match_expressions=(Requirement("disk-type", "NotIn", ("hdd",)),))
    assert selector_matches({"disk-type": "ssd"}, not_in)
    assert selector_matches({}, not_in)  # absent key satisfies NotIn
    assert not selector_matches({"disk-type": "hdd"}, not_in)

    exists = LabelSelector(match_expressions=(Requirement("gpu", "Exists"),))
    assert selector_matches({"gpu": ""}, exists)
    assert not selector_matches({}, exists)

    absent = LabelSelector(match_expressions=(Requirement("gpu", "DoesNotExist"),))
    assert selector_matches({}, absent)
    assert not selector_matches({"gpu": "a100"}, absent)


def test_equality_and_expressions_are_conjunctive():
    sel = LabelSelector(
        match_labels={"env": "prod"},
        match_expressions=(Requirement("zone", "In", ("a", "b")),),
    )
    assert selector_matches({"env": "prod", "zone": "b"}, sel)
    assert not selector_matches({"env": "prod", "zone": "c"}, sel)
    assert not selector_matches({"env": "dev", "zone": "a"}, sel)


def test_unknown_operator_does_not_match_or_raise():
    sel = LabelSelector(match_expressions=(Requirement("zone", "Like", ("a",)),))
    assert selector_matches({"zone": "a"}, sel) is False


def test_from_dict_reads_kubernetes_shape():
    sel = LabelSelector.from_dict(
        {
            "matchLabels": {"type": "special"},
            "matchExpressions": [{"key": "disk-type", "operator": "In", "values": ["ssd", "nvme"]}],
        }
    )
    assert sel.match_labels == {"type": "special"}
    assert sel.match_expressions == (Requirement("disk-type", "In", ("ssd", "nvme")),)
    assert LabelSelector.from_dict(None) is None
    assert LabelSelector.from_dict(sel.to_dict()) == sel


def test_selector_violations():
    assert selector_violations(LabelSelector(match_labels={"key": "value"}), "s") == []
    assert selector_violations(LabelSelector(match_labels={"example.com/role": "db"}), "s") == []

    bad_key = selector_violations(LabelSelector(match_labels={"invalid-key-": "value"}), "s")
    assert [v.field_path for v in bad_key] == ["s.matchLabels[invalid-key-]"]
    assert bad_key[0].kind == "SelectorError"

    bad_prefix = selector_violations(LabelSelector(match_labels={"Example.com/role": "db"}), "s")
    assert len(bad_prefix) == 1

    bad_value = selector_violations(LabelSelector(match_labels={"key": "-bad"}), "s")
    assert len(bad_value) == 1

    missing = selector_violations(None, "s")
    assert missing[0].field_path == "s"
    assert missing[0].message == "selector is required"


def test_selector_violations_for_expressions():
    sel = LabelSelector(
        match_expressions=(
            Requirement("zone", "Like", ("a",)),
            Requirement("zone", "In", ()),
            Requirement("gpu", "Exists", ("yes",)),
        )
    )
    paths = [v.field_path for v in selector_violations(sel, "s")]
    assert paths == [
        "s.matchExpressions[0].operator",
        "s.matchExpressions[1].values",
        "s.matchExpressions[2].values",
    ]
