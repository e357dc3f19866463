import json
import pickle

import pytest
import yaml

from survgrad.runner import AttributionRunner


def _write_config(tmp_path, cfg):
    path = tmp_path / "attribution.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return str(path)


def test_runner_writes_results(tmp_path, deepsurv_explainer):
    exp_path = tmp_path / "explainer.pt"
    deepsurv_explainer.save(str(exp_path))
    cfg = {
        "explainer": str(exp_path),
        "output_dir": str(tmp_path / "runs"),
        "methods": [
            {"name": "Surv_Gradient", "params": {"target": "hazard", "instance": [1, 3]}},
            {"name": "Surv_IntHessian", "params": {"n": 2, "instance": [2], "dtype": "double"}},
            "Surv_Gradient",
        ],
    }
    rows = AttributionRunner(_write_config(tmp_path, cfg)).run()

    assert [r["method"] for r in rows] == ["Surv_Gradient", "Surv_IntHessian", "Surv_Gradient"]
    assert rows[0]["res_shapes"] == [[2, 5, 20]]
    assert rows[1]["res_shapes"] == [[1, 5, 20]]
    assert rows[2]["res_shapes"] == [[1, 5, 20]]

    with open(f"{rows[1]['dir']}/result.pkl", "rb") as f:
        saved = pickle.load(f)
    assert saved["method"] == "Surv_IntHessian"
    assert saved["res"][0].shape == (1, 5, 20)
    assert saved["model_class"] == "DeepSurv"

    with open(f"{rows[0]['dir']}/config.json") as f:
        snap = json.load(f)
    assert snap["method_args"]["target"] == "hazard"
    assert snap["method_args"]["instance"] == [1, 3]


@pytest.mark.parametrize("cfg", [{"methods": ["Surv_Gradient"]}, {"explainer": "x.pt", "methods": []}])
def test_runner_rejects_incomplete_config(tmp_path, cfg):
    with pytest.raises(ValueError):
        AttributionRunner(_write_config(tmp_path, cfg))


def test_runner_unknown_method(tmp_path, deepsurv_explainer):
    exp_path = tmp_path / "explainer.pt"
    deepsurv_explainer.save(str(exp_path))
    cfg = {"explainer": str(exp_path), "output_dir": str(tmp_path / "runs"),
           "methods": [{"name": "Surv_SmoothGrad"}]}
    with pytest.raises(KeyError):
        AttributionRunner(_write_config(tmp_path, cfg)).run()
