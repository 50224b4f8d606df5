import numpy as np

from evodynamics.config import config_two_species_grid
from evodynamics.metrics import collect_record, node_table, occupancy_entropy
from evodynamics.model import Model


def test_occupancy_entropy_bounds():
    assert occupancy_entropy([5, 0, 0, 0]) == 0.0
    assert np.isclose(occupancy_entropy([3, 3, 3, 3]), np.log(4))
    assert np.isnan(occupancy_entropy([0, 0]))


def test_records_and_node_table():
    model = Model(config_two_species_grid(seed=3))
    rows = collect_record(model)
    assert [r["species"] for r in rows] == [0, 1]
    assert all(r["N"] == 800 and r["occupied_nodes"] == 4 for r in rows)
    df = node_table(model)
    assert len(df) == 8
    assert df["count"].sum() == model.nindividuals
