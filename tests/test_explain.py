from reef_dosing.assembler import assemble
from reef_dosing.explain import build_explanation, math_lines
from reef_dosing.models import DosingSnapshot


def test_build_explanation_for_ready_plan(ready_snapshot, now):
    plan = assemble(ready_snapshot, now=now)
    payload = build_explanation(ready_snapshot, plan)

    used = payload["used"]
    assert used["tank_liters"] == 70
    assert used["targets"] == {"alk": 8.0, "ca": 430.0}
    assert used["current_doses"]["alk"] == 10.0
    product = used["products"][0]
    assert product["brand"] == "Acme"
    assert product["dose_ref_ml"] == 30

    alk = payload["parameters"]["alk"]
    assert alk["figures"]["sample_count"] == 3
    assert any(line.startswith("rate = ") for line in alk["math"])
    assert any(line.startswith("daily = ") for line in alk["math"])


def test_build_explanation_for_blocked_plan(now):
    snapshot = DosingSnapshot.create()
    plan = assemble(snapshot, now=now)
    payload = build_explanation(snapshot, plan)
    assert payload["questions"][0] == "What is your tank volume in liters?"
    assert payload["follow_up"].startswith("I need a bit more info:")
    assert "used" not in payload


def test_math_lines_within_tolerance(ready_snapshot, now):
    snapshot = DosingSnapshot.create(
        tank=ready_snapshot.tank,
        targets={"alk": 6.6},
        readings=ready_snapshot.readings,
        products=ready_snapshot.products,
        current_doses=ready_snapshot.current_doses,
    )
    rec = assemble(snapshot, now=now).get("alk")
    lines = math_lines(rec)
    assert "one-time = 0 ml (within tolerance)" in lines
    assert lines[-1].startswith("daily = 10")
