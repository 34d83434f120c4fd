import json

import numpy as np

from nlayernet.config import NetworkConfig, load_config
from nlayernet.core.types import TrainStatus
from nlayernet.training import pipelines


def _config(**train):
    config = pipelines.load_preset("xor")
    config["train"].update({"max_iterations": 50, "keep_alive": 0})
    config["train"].update(train)
    return config


def test_train_run_and_save(tmp_path):
    config = _config(keep_alive=10)
    config["mode"]["save"] = str(tmp_path / "xor.bin")
    config["report"] = {
        "metrics_jsonl": str(tmp_path / "progress.jsonl"),
        "metrics_csv": str(tmp_path / "progress.csv"),
        "plot_dir": str(tmp_path / "plots"),
    }
    result = pipelines.run_pipeline(config)

    assert result.ok
    assert result.train.iterations == 50
    assert result.train.status is TrainStatus.MAX_ITERS_REACHED
    assert result.outputs.shape == (4, 1)
    assert np.all((result.outputs > 0) & (result.outputs < 1))
    assert result.weights_saved and (tmp_path / "xor.bin").exists()
    assert result.train_ms > 0 and result.run_ms > 0

    records = [json.loads(line) for line in (tmp_path / "progress.jsonl").read_text().splitlines()]
    assert [r["iteration"] for r in records] == [10, 20, 30, 40, 50]
    assert (tmp_path / "progress.csv").exists()
    assert (tmp_path / "plots" / "error.png").exists()


def test_same_seed_gives_same_weights():
    first = pipelines.run_pipeline(_config(seed=5))
    second = pipelines.run_pipeline(_config(seed=5))
    for a, b in zip(first.extra["weights"], second.extra["weights"]):
        assert np.array_equal(a, b)
    assert first.train.average_error == second.train.average_error


def test_saved_weights_reproduce_outputs_in_run_only_session(tmp_path):
    path = tmp_path / "and.bin"
    config = _config()
    config["data"]["name"] = "and"
    config["mode"]["save"] = str(path)
    trained = pipelines.run_pipeline(config)

    reload = _config()
    reload["data"]["name"] = "and"
    reload["mode"] = {"train": False, "run": True, "load": str(path), "save": None}
    replayed = pipelines.run_pipeline(reload)

    assert replayed.weights_loaded
    assert replayed.train is None
    assert np.array_equal(replayed.outputs, trained.outputs)


def test_failed_load_is_reported_and_skips_run(tmp_path):
    path = tmp_path / "wide.bin"
    wide = _config()
    wide["model"]["layers"] = [2, 3, 1]
    wide["mode"]["save"] = str(path)
    pipelines.run_pipeline(wide)

    config = _config()
    config["mode"]["load"] = str(path)
    result = pipelines.run_pipeline(config)

    assert not result.ok
    assert "layer 1" in result.load_error
    assert not result.weights_loaded
    assert result.train.iterations == 50
    assert result.outputs is None


def test_failed_save_is_reported(tmp_path):
    config = _config()
    config["mode"]["save"] = str(tmp_path / "missing-dir" / "w.bin")
    result = pipelines.run_pipeline(config)
    assert result.save_error is not None
    assert not result.weights_saved
    assert result.outputs is not None


def test_key_value_config_with_data_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "cases.txt").write_text("0,0\n0,1\n1,0\n1,1\n")
    (tmp_path / "truth.txt").write_text("0,1,1,1\n")
    (tmp_path / "net.txt").write_text(
        "layer,2-3-1\n"
        "num_test_cases,4\n"
        "is_training,y\n"
        "is_running,y\n"
        "is_loading,n\n"
        "is_saving,y\n"
        "weights_out_file,or.bin\n"
        "testcase_file,cases.txt\n"
        "truthtable_file,truth.txt\n"
        "binarytc,n\n"
        "printtc,y\n"
        "random_lower_bound,-1.5\n"
        "random_upper_bound,1.5\n"
        "max_iterations,20\n"
        "error_threshold,0.0002\n"
        "lambda,0.3\n"
        "keepalive,0\n"
    )
    cfg = load_config(tmp_path / "net.txt")
    assert isinstance(cfg, NetworkConfig)
    result = pipelines.run_pipeline(cfg)

    assert result.dataset.truth_table.ravel().tolist() == [0, 1, 1, 1]
    assert result.train.iterations == 20
    assert result.outputs.shape == (4, 1)
    assert (tmp_path / "or.bin").stat().st_size == 3 * 4 + (2 * 3 + 3 * 1) * 8
