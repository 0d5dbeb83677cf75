import pytest

from water_potability.config import PotabilityConfig


REFERENCE_FIELDS = {
    "ph": "7.5",
    "hardness": "200",
    "solids": "500",
    "chloramines": "2.5",
    "sulfate": "250",
    "conductivity": "400",
    "organic_carbon": "10",
    "trihalomethanes": "50",
    "turbidity": "3.5",
}


@pytest.fixture
def reference_fields():
    return dict(REFERENCE_FIELDS)


@pytest.fixture
def cfg(tmp_path):
    return PotabilityConfig(latency_seconds=0.0, export_dir=tmp_path / "outputs")
