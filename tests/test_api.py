from __future__ import annotations

PATCH = {"spec": {"containers": [{"name": "test-container", "env": [{"name": "PATCHED", "value": "patched-value"}]}]}}


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_validate_reports_all_violations(client):
    r = client.post(
        "/patches/validate",
        json={
            "patches": [
                {"selector": {"matchLabels": {"invalid-key-": "value"}}, "patch": PATCH},
                {"selector": {"matchLabels": {"key": "value"}}, "patch": "invalid json"},
                {"patch": PATCH},
            ]
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["allowed"] is False
    assert [(v["field"], v["kind"]) for v in body["violations"]] == [
        ("spec.patches[0].selector.matchLabels[invalid-key-]", "SelectorError"),
        ("spec.patches[1].patch", "PayloadError"),
        ("spec.patches[2].selector", "SelectorError"),
    ]


def test_validate_accepts_complex_selector(client):
    r = client.post(
        "/patches/validate",
        json={
            "patches": [
                {
                    "selector": {"matchExpressions": [{"key": "disk-type", "operator": "In", "values": ["ssd", "nvme"]}]},
                    "priority": 1000,
                    "patch": PATCH,
                }
            ]
        },
    )
    assert r.status_code == 200
    assert r.json() == {"allowed": True, "violations": []}


def test_resolve(client, base_template):
    r = client.post(
        "/resolve",
        json={
            "template": base_template,
            "node_labels": {"node-type": "special"},
            "patches": [{"name": "special-env", "selector": {"matchLabels": {"node-type": "special"}}, "patch": PATCH}],
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["applied_patches"] == ["special-env"]
    assert [e["name"] for e in body["template"]["spec"]["containers"][0]["env"]] == ["DEFAULT", "PATCHED"]
    assert len(body["fingerprint"]) == 64


def test_resolve_merge_error_is_422(client, base_template):
    r = client.post(
        "/resolve",
        json={
            "template": base_template,
            "node_labels": {"node-type": "special"},
            "patches": [
                {
                    "selector": {"matchLabels": {"node-type": "special"}},
                    "patch": {"spec": {"containers": [{"name": "test-container", "image": 5}]}},
                }
            ],
        },
    )
    assert r.status_code == 422
    assert r.json()["detail"] == {
        "field": "patches[0].patch.spec.containers[0].image",
        "message": "expected a string, got number",
        "patch_id": "patches[0]",
    }


def test_resolve_batch(client, base_template):
    r = client.post(
        "/resolve/batch",
        json={
            "template": base_template,
            "nodes": {"n1": {"pool": "gpu"}, "n2": {"pool": "cpu"}, "n3": {"pool": "broken"}},
            "patches": [
                {"selector": {"matchLabels": {"pool": "gpu"}}, "patch": PATCH},
                {"selector": {"matchLabels": {"pool": "broken"}}, "patch": {"spec": {"hostNetwork": "yes"}}},
            ],
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert set(body["results"]) == {"n1", "n2"}
    assert body["results"]["n1"]["applied_patches"] == ["patches[0]"]
    assert body["results"]["n2"]["applied_patches"] == []
    assert body["errors"]["n3"]["field"] == "patches[1].patch.spec.hostNetwork"


def test_priority_is_not_coerced(client):
    selector = {"matchLabels": {"key": "value"}}
    r = client.post("/patches/validate", json={"patches": [{"selector": selector, "priority": "10", "patch": PATCH}]})
    assert r.status_code == 422

    r = client.post("/patches/validate", json={"patches": [{"selector": selector, "priority": 2**31, "patch": PATCH}]})
    assert r.status_code == 200
    assert [(v["field"], v["kind"]) for v in r.json()["violations"]] == [
        ("spec.patches[0].priority", "LimitExceeded")
    ]
