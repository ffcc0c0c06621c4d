import logging

from reef_dosing.constants import Parameter
from reef_dosing.gate import (
    TANK_VOLUME_QUESTION,
    GateState,
    check_readiness,
    evaluate,
    format_follow_up,
)
from reef_dosing.models import Potency, Product, QuestionKind, Tank

ALL_DOSES = {Parameter.ALK: 10.0, Parameter.CA: 8.0, Parameter.MG: 2.0}
GOOD = Potency(dose_ref_ml=30, delta_ref_value=15, volume_ref_liters=35)


def _product(parameter, potency=GOOD, **kwargs):
    return Product(parameter=parameter, potency=potency, **kwargs)


def test_ready_when_all_facts_present():
    products = [_product(Parameter.ALK), _product(Parameter.CA)]
    assert check_readiness(Tank(volume_liters=300), ALL_DOSES, products) == []
    result = evaluate(Tank(volume_liters=300), ALL_DOSES, products)
    assert result.state is GateState.READY
    assert result.ready


def test_missing_volume_and_one_dose_gives_two_questions():
    doses = {Parameter.ALK: 10.0, Parameter.CA: 8.0}
    questions = check_readiness(None, doses, [_product(Parameter.ALK)])
    assert len(questions) == 2
    assert questions[0].kind is QuestionKind.TANK_VOLUME
    assert str(questions[0]) == TANK_VOLUME_QUESTION
    assert questions[1].kind is QuestionKind.CURRENT_DOSE
    assert questions[1].parameter is Parameter.MG
    assert questions[1].text == "How many ml/day are you currently dosing for MG?"


def test_checks_accumulate_in_fixed_order():
    products = [
        _product(Parameter.ALK, Potency(dose_ref_ml=0, delta_ref_value=1, volume_ref_liters=1), id="p1", brand="Acme", name="Alk"),
        _product(Parameter.MG, Potency(), id="p2"),
    ]
    questions = check_readiness(Tank(volume_liters=0), {}, products)
    kinds = [q.kind for q in questions]
    assert kinds == [
        QuestionKind.TANK_VOLUME,
        QuestionKind.CURRENT_DOSE,
        QuestionKind.CURRENT_DOSE,
        QuestionKind.CURRENT_DOSE,
        QuestionKind.POTENCY,
        QuestionKind.POTENCY,
    ]
    assert [q.parameter for q in questions[1:4]] == [Parameter.ALK, Parameter.CA, Parameter.MG]
    assert questions[4].product_id == "p1"
    assert questions[4].text.startswith("For Acme Alk (ALK), provide potency")
    assert questions[5].text.startswith("For your product (MG)")


def test_gallon_volume_counts_as_present():
    tank = Tank(volume_value=50, volume_unit="gal")
    assert check_readiness(tank, ALL_DOSES, []) == []


def test_custom_sustaining_parameters():
    questions = check_readiness(Tank(volume_liters=100), {}, [], sustaining=[Parameter.ALK])
    assert [q.parameter for q in questions] == [Parameter.ALK]
    assert check_readiness(Tank(volume_liters=100), {}, [], sustaining=()) == []


def test_blocked_gate_logs(caplog):
    with caplog.at_level(logging.INFO, logger="reef_dosing.gate"):
        result = evaluate(None, ALL_DOSES, [])
    assert result.state is GateState.BLOCKED
    assert len(result.questions) == 1
    assert "1 follow-up" in caplog.text


def test_format_follow_up():
    questions = check_readiness(None, {}, [], sustaining=[Parameter.CA])
    text = format_follow_up(questions)
    assert text.splitlines() == [
        "I need a bit more info:",
        "• What is your tank volume in liters?",
        "• How many ml/day are you currently dosing for CA?",
    ]
    assert format_follow_up([]) == ""


def test_extreme_potency_asks_for_potency():
    extreme = Potency(dose_ref_ml=1e-200, delta_ref_value=1.0, volume_ref_liters=1e-200)
    questions = check_readiness(Tank(volume_liters=300), ALL_DOSES, [_product(Parameter.ALK, extreme)])
    assert [q.kind for q in questions] == [QuestionKind.POTENCY]


def test_unknown_volume_unit_asks_for_volume():
    questions = check_readiness(Tank(volume_value=10, volume_unit="cups"), ALL_DOSES, [])
    assert [q.kind for q in questions] == [QuestionKind.TANK_VOLUME]


def test_nan_dose_counts_as_missing():
    doses = {**ALL_DOSES, Parameter.ALK: float("nan")}
    questions = check_readiness(Tank(volume_liters=300), doses, [])
    assert [q.parameter for q in questions] == [Parameter.ALK]
