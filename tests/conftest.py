from datetime import UTC, datetime, timedelta

import pytest

from reef_dosing.constants import Parameter
from reef_dosing.models import DosingSnapshot, Potency, Product, Reading, Tank
from reef_dosing.utils import clear_dataset_cache

NOW = datetime(2024, 5, 8, 12, 0, tzinfo=UTC)


def make_reading(parameter, value, days_ago, now=NOW):
    return Reading(Parameter.normalize(parameter), value, now - timedelta(days=days_ago))


@pytest.fixture(autouse=True)
def _reset_dataset_cache():
    clear_dataset_cache()
    yield
    clear_dataset_cache()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def alk_product():
    # 30 ml raises 15 dKH in 35 L -> 1.0 dKH/ml in a 70 L tank
    return Product(
        parameter=Parameter.ALK,
        potency=Potency(dose_ref_ml=30, delta_ref_value=15, volume_ref_liters=35),
        id="p-alk",
        brand="Acme",
        name="Alk Plus",
    )


@pytest.fixture
def ready_snapshot(alk_product):
    return DosingSnapshot.create(
        tank=Tank(id="t1", volume_liters=70),
        targets={"alk": 8.0, "ca": 430},
        readings=[
            make_reading("alk", 7.4, 4),
            make_reading("alk", 7.0, 2),
            make_reading("alk", 6.6, 0),
        ],
        products=[alk_product],
        current_doses={"alk": 10.0, "ca": 8.0, "mg": 2.0},
    )
